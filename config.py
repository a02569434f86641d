"""Configuration settings for the Copilot blueprint pipeline."""

# Load .env into os.environ so provider fallbacks (e.g. OPENAI_API_KEY) work
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

import logging
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


DEFAULT_ACKNOWLEDGEMENT = "Updated the blueprint - let me know if you want refinements."


class Settings(BaseSettings):
    """Global settings for the Copilot pipeline.

    Settings can be overridden via environment variables with COPILOT_ prefix.
    Example: COPILOT_MODEL=gpt-4o
    """

    # Model config
    provider: str = Field(
        default="openai",
        description="LLM provider used for copilot replies"
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model used for copilot replies"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for copilot replies"
    )
    max_tokens: int = Field(
        default=800,
        description="Maximum tokens per copilot reply"
    )

    # Conversation
    context_window_messages: int = Field(
        default=8,
        ge=1,
        description="Most recent messages sent to the model; older ones are dropped"
    )
    default_acknowledgement: str = Field(
        default=DEFAULT_ACKNOWLEDGEMENT,
        description="Display text used when a reply holds nothing but structured data"
    )

    # API settings (env: COPILOT_<KEY> or standard env var)
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (env: COPILOT_OPENAI_API_KEY)",
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (env: COPILOT_ANTHROPIC_API_KEY)",
    )
    deepseek_api_key: str = Field(
        default="",
        description="Deepseek API key (env: COPILOT_DEEPSEEK_API_KEY)",
    )
    api_timeout_seconds: int = Field(
        default=60,
        description="API call timeout in seconds"
    )
    api_max_retries: int = Field(
        default=2,
        description="Retries performed by the provider SDK on transport failure"
    )

    log_level: str = Field(
        default="INFO",
        description="Root log level for the CLI"
    )

    model_config = {
        "env_prefix": "COPILOT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",  # ignore extra env vars (e.g. OPENAI_API_KEY) not in schema
    }


# Ordered (pattern, canonical name) table for spotting systems in chat text.
# Patterns are matched case-insensitively.
SYSTEM_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    # CRM
    (r"\bsales\s?force\b", "Salesforce"),
    (r"\bhub\s?spot\b", "HubSpot"),
    (r"\bpipedrive\b", "Pipedrive"),
    (r"\bzoho\b", "Zoho"),
    (r"\bdynamics\b", "Microsoft Dynamics"),
    # Accounting and payments
    (r"\bquick\s?books\b", "QuickBooks"),
    (r"\bxero\b", "Xero"),
    (r"\bnetsuite\b", "NetSuite"),
    (r"\bfreshbooks\b", "FreshBooks"),
    (r"\bstripe\b", "Stripe"),
    (r"\bbill\.com\b", "Bill.com"),
    # Communication
    (r"\bslack\b", "Slack"),
    (r"\b(?:ms|microsoft)\s+teams\b", "Microsoft Teams"),
    (r"\btwilio\b", "Twilio"),
    (r"\bzendesk\b", "Zendesk"),
    (r"\bintercom\b", "Intercom"),
    (r"\bmailchimp\b", "Mailchimp"),
    (r"\bgmail\b", "Gmail"),
    (r"\boutlook\b", "Outlook"),
    # Productivity
    (r"\bgoogle\s+sheets?\b", "Google Sheets"),
    (r"\bexcel\b", "Excel"),
    (r"\bairtable\b", "Airtable"),
    (r"\bnotion\b", "Notion"),
    (r"\basana\b", "Asana"),
    (r"\btrello\b", "Trello"),
    (r"\bjira\b", "Jira"),
    (r"\bmonday\.com\b", "Monday.com"),
    (r"\bdocu\s?sign\b", "DocuSign"),
    (r"\bgoogle\s+drive\b", "Google Drive"),
    (r"\bdropbox\b", "Dropbox"),
    (r"\bsharepoint\b", "SharePoint"),
    (r"\bshopify\b", "Shopify"),
    # Generic
    (r"\be-?mails?\b", "Email"),
)


class PipelineConfig(BaseModel):
    """Immutable knobs for one orchestrator instance.

    Built once (usually from Settings) and handed to the orchestrator, so
    tests can run the pipeline against alternate configurations.
    """

    model_config = ConfigDict(frozen=True)

    model: Optional[str] = None
    temperature: float = 0.1
    max_tokens: int = 800
    context_window_messages: int = Field(default=8, ge=1)
    default_acknowledgement: str = DEFAULT_ACKNOWLEDGEMENT
    system_keywords: Tuple[Tuple[str, str], ...] = SYSTEM_KEYWORDS
    max_detected_systems: int = 2

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "PipelineConfig":
        """Create a pipeline config from global settings."""
        source = source or settings
        return cls(
            model=source.model,
            temperature=source.temperature,
            max_tokens=source.max_tokens,
            context_window_messages=source.context_window_messages,
            default_acknowledgement=source.default_acknowledgement,
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a basic stderr handler to the root logger."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Create singleton instance
settings = Settings()
