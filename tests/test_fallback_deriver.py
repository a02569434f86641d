"""Tests for heuristic step derivation from reply prose."""

from contracts import StepType
from copilot.fallback_deriver import (
    derive_steps_from_text,
    extract_candidates,
    make_step_id,
    make_title,
)


class TestExtractCandidates:
    """Test candidate selection."""

    def test_numbered_lines(self):
        """Test numbered lines with either marker style are picked up."""
        text = "Here's the flow:\n1. Get the invoice\n2) Extract vendor\nThanks"
        assert extract_candidates(text) == ["Get the invoice", "Extract vendor"]

    def test_bullets(self):
        """Test dash and star bullets are picked up."""
        text = "- Watch the inbox\n* Save attachments"
        assert extract_candidates(text) == ["Watch the inbox", "Save attachments"]

    def test_single_bullet_falls_back_to_sentences(self):
        """Test one enumerated line is not enough and sentences are used instead."""
        text = "- Watch the inbox. Then we file it somewhere safe. Ok."
        assert extract_candidates(text) == ["- Watch the inbox", "Then we file it somewhere safe"]

    def test_sentence_fallback_drops_short_pieces_and_caps_at_five(self):
        """Test short sentences are dropped and at most five are kept."""
        text = "Short. " + " ".join(f"Sentence number {i} here." for i in range(8))
        candidates = extract_candidates(text)
        assert len(candidates) == 5
        assert candidates[0] == "Sentence number 0 here"
        assert "Short" not in candidates

    def test_nothing_usable(self):
        """Test text made of short sentences gives no candidates."""
        assert extract_candidates("Ok. Yes. Sure.") == []


class TestStepIdsAndTitles:
    """Test slug ids and title truncation."""

    def test_slug_id(self):
        """Test the id combines the position and a slug."""
        assert make_step_id("Get the invoice", 0) == "auto_1_get-the-invoice"

    def test_slug_collapses_punctuation(self):
        """Test runs of punctuation collapse to one hyphen and are trimmed."""
        assert make_step_id("  Post -- to (the) ledger!  ", 2) == "auto_3_post-to-the-ledger"

    def test_slug_truncated_to_24_characters(self):
        """Test long slugs are cut to 24 characters."""
        step_id = make_step_id("Reconcile every single payment against the bank feed", 0)
        assert step_id == "auto_1_" + "reconcile-every-single-payment"[:24]
        assert len(step_id) == len("auto_1_") + 24

    def test_empty_slug_uses_generic_id(self):
        """Test content without letters or digits gets a generic id."""
        assert make_step_id("!!! ???", 4) == "auto_step_5"

    def test_short_title_is_verbatim(self):
        """Test short content is used as the title unchanged."""
        assert make_title("Extract vendor") == "Extract vendor"

    def test_sixty_characters_is_verbatim(self):
        """Test content of exactly sixty characters is not truncated."""
        content = "x" * 60
        assert make_title(content) == content

    def test_long_title_truncated_with_ellipsis(self):
        """Test longer content is cut to sixty characters ending in an ellipsis."""
        content = "a" * 70
        title = make_title(content)
        assert len(title) == 60
        assert title.endswith("...")
        assert title[:57] == content[:57]


class TestDeriveStepsFromText:
    """Test derive_steps_from_text end to end."""

    def test_numbered_list_becomes_linear_chain(self):
        """Test a numbered list becomes a trigger followed by chained actions."""
        steps = derive_steps_from_text("1. Get the invoice\n2. Extract vendor\n3. Post to ledger")
        assert [s.id for s in steps] == [
            "auto_1_get-the-invoice",
            "auto_2_extract-vendor",
            "auto_3_post-to-ledger",
        ]
        assert [s.type for s in steps] == [StepType.TRIGGER, StepType.ACTION, StepType.ACTION]
        assert steps[0].depends_on_ids == []
        assert steps[1].depends_on_ids == ["auto_1_get-the-invoice"]
        assert steps[2].depends_on_ids == ["auto_2_extract-vendor"]
        assert steps[1].summary == "Extract vendor"

    def test_long_bullet_title(self):
        """Test a long bullet keeps its full text as the summary."""
        long_item = "b" * 70
        steps = derive_steps_from_text(f"- {long_item}\n- Notify the team")
        assert len(steps[0].title) == 60
        assert steps[0].title.endswith("...")
        assert steps[0].summary == long_item

    def test_sentences_when_no_list(self):
        """Test plain sentences become steps when there is no list."""
        steps = derive_steps_from_text("We receive invoices by email. Finance approves them")
        assert [s.title for s in steps] == ["We receive invoices by email", "Finance approves them"]
        assert steps[1].depends_on_ids == [steps[0].id]

    def test_no_candidates_returns_none(self):
        """Test text without candidates derives nothing."""
        assert derive_steps_from_text("Ok.") is None
        assert derive_steps_from_text("") is None

    def test_ids_are_unique_and_never_self_referencing(self):
        """Test repeated content still gives unique ids and no self dependencies."""
        steps = derive_steps_from_text("- Same step\n- Same step\n- Same step")
        ids = [s.id for s in steps]
        assert len(set(ids)) == len(ids)
        for step in steps:
            assert step.id not in step.depends_on_ids
