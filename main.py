#!/usr/bin/env python3
"""Copilot CLI - run one blueprint design turn from the command line.

Usage:
    # One turn against a saved conversation (empty blueprint if none given)
    python main.py --messages ./conversation.json --name "Invoice intake"

    # Continue from an existing blueprint with a specific model
    python main.py --blueprint ./blueprint.json --messages ./conversation.json --model gpt-4o

    # Parse a saved model reply offline (no model call)
    python main.py --reply ./reply.txt
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.panel import Panel
    from rich.progress import Progress, SpinnerColumn, TextColumn
except ImportError:
    print("Missing dependencies. Run: pip install click rich")
    sys.exit(1)

from pydantic import ValidationError

from config import configure_logging, settings
from contracts import Blueprint, BlueprintUpdates, ConversationMessage
from contracts.adapters import create_empty_blueprint
from copilot import parse_copilot_reply
from orchestrator import resolve_blueprint_updates, run_copilot_orchestration
from providers import CompletionError, list_providers as get_available_providers


console = Console()


def load_blueprint(path: Optional[str]) -> Blueprint:
    """Load a blueprint JSON file, or start from an empty one."""
    if not path:
        return create_empty_blueprint()
    return Blueprint.model_validate_json(Path(path).read_text(encoding="utf-8"))


def load_messages(path: str) -> list:
    """Load a JSON list of {"role", "content"} messages."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [ConversationMessage.model_validate(item) for item in data]


def print_updates(updates: Optional[BlueprintUpdates]) -> None:
    if updates is None:
        console.print("[dim]No blueprint updates this turn.[/dim]")
        return
    payload = updates.model_dump(mode="json", by_alias=True, exclude_unset=True)
    console.print("[bold]Blueprint updates:[/bold]")
    console.print_json(json.dumps(payload))


@click.command()
@click.option(
    "--messages", "-m", "messages_path",
    required=False,
    help="Path to a JSON list of conversation messages"
)
@click.option(
    "--blueprint", "-b", "blueprint_path",
    default=None,
    help="Path to the current blueprint JSON (default: empty blueprint)"
)
@click.option(
    "--name", "-n", "automation_name",
    default=None,
    help="Automation name used in the system prompt"
)
@click.option(
    "--provider", "-p",
    type=click.Choice(["openai", "anthropic", "deepseek", "litellm"]),
    default=None,
    help=f"LLM provider (default: {settings.provider})"
)
@click.option(
    "--model",
    default=None,
    help="Model name (e.g., gpt-4o, claude-haiku, deepseek-chat)"
)
@click.option(
    "--reply", "-r", "reply_path",
    default=None,
    help="Parse a saved model reply instead of calling a model"
)
@click.option(
    "--list-providers",
    is_flag=True,
    help="List available providers and exit"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Verbose (debug) logging"
)
def main(
    messages_path: Optional[str],
    blueprint_path: Optional[str],
    automation_name: Optional[str],
    provider: Optional[str],
    model: Optional[str],
    reply_path: Optional[str],
    list_providers: bool,
    verbose: bool,
):
    """Copilot: turn a design conversation into blueprint updates."""
    configure_logging("DEBUG" if verbose else None)

    # Handle --list-providers
    if list_providers:
        console.print("[bold]Available LLM Providers:[/bold]\n")
        for name, available in get_available_providers().items():
            status = "[green]✓ Ready[/green]" if available else "[red]✗ No API key[/red]"
            console.print(f"  {name:12} {status}")
        console.print("\n[dim]Set API keys via environment variables:[/dim]")
        console.print("  OPENAI_API_KEY, ANTHROPIC_API_KEY, DEEPSEEK_API_KEY")
        return

    # Offline parse of a saved reply
    if reply_path:
        acknowledgement = settings.default_acknowledgement
        parsed = parse_copilot_reply(Path(reply_path).read_text(encoding="utf-8"), acknowledgement)
        updates = resolve_blueprint_updates(parsed.display_text, parsed.blueprint_updates, acknowledgement)
        console.print(Panel(parsed.display_text, title="Display text", border_style="blue"))
        print_updates(updates)
        return

    if not messages_path:
        console.print("[red]Error: --messages is required (or use --reply)[/red]")
        sys.exit(1)

    try:
        blueprint = load_blueprint(blueprint_path)
        messages = load_messages(messages_path)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Error reading input:[/red] {e}")
        sys.exit(1)

    console.print(Panel.fit(
        "[bold blue]Copilot[/bold blue]\n"
        "[dim]Blueprint synthesis[/dim]",
        border_style="blue"
    ))
    console.print(f"[dim]Messages:[/dim] {len(messages)}  [dim]Steps:[/dim] {len(blueprint.steps)}")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Waiting for the copilot...", total=None)
        try:
            result = run_copilot_orchestration(
                blueprint,
                messages,
                automation_name=automation_name,
                provider=provider,
                model=model,
            )
        except CompletionError as e:
            progress.stop()
            logging.getLogger(__name__).debug("Completion failed", exc_info=True)
            console.print(f"[red]Completion failed:[/red] {e}")
            sys.exit(1)
        progress.update(task, completed=True)

    console.print(f"\n[green]Phase:[/green] {result.conversation_phase.value}")
    console.print("[green]Thinking:[/green]")
    for label in result.thinking_steps:
        console.print(f"  - {label}")
    console.print(Panel(result.assistant_display_text, title="Assistant", border_style="green"))
    print_updates(result.blueprint_updates)


if __name__ == "__main__":
    main()
