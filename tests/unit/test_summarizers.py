"""
Unit tests for summarizer adapters.
"""

from unittest.mock import Mock, patch

import pytest

from doc_search.exceptions import ConfigurationError, SummarizerError
from doc_search.summarizers import normalize_summary
from doc_search.summarizers.extractive import ExtractiveSummarizer, plain_lines
from doc_search.summarizers.factory import create_summarizer
from doc_search.summarizers.llm import LLMSummarizer


class TestNormalizeSummary:
    """Tests for normalize_summary()."""

    def test_collapses_whitespace(self):
        assert normalize_summary("  one\n two\t\tthree  ", 100) == "one two three"

    def test_cuts_at_word_boundary(self):
        assert normalize_summary("alpha beta gamma", 12) == "alpha beta"

    def test_hard_cut_without_spaces(self):
        assert normalize_summary("abcdefghij", 5) == "abcde"

    def test_short_text_unchanged(self):
        assert normalize_summary("short", 250) == "short"


class TestExtractiveSummarizer:
    """Tests for the deterministic offline summarizer."""

    def test_terse_summary_leads_with_headings(self, setup_markdown):
        terse, detailed = ExtractiveSummarizer().summarize(setup_markdown)

        assert terse.startswith("Setup Guide; Installation; Configuration; Advanced.")
        assert "max_retries" in terse
        assert len(terse) <= 250
        assert detailed.startswith("Install the client before anything else.")

    def test_deterministic(self, setup_markdown):
        summarizer = ExtractiveSummarizer()

        assert summarizer.summarize(setup_markdown) == summarizer.summarize(setup_markdown)

    def test_section_summary_is_first_sentence(self):
        text = "## Errors\n\nAll errors derive from ExampleError. Catch it once.\n"

        assert ExtractiveSummarizer().summarize_section(text) == "All errors derive from ExampleError."

    def test_code_fences_dropped(self):
        text = "## Usage\n\n```python\nsecret_call()\n```\n\nVisible text.\n"

        assert ExtractiveSummarizer().summarize_section(text) == "Visible text."

    def test_links_reduced_to_text(self):
        headings, body = plain_lines("## See [the guide](http://example.com/guide)\n\nRead [this](x.md) first.\n")

        assert headings == ["See the guide"]
        assert body == ["Read this first."]

    def test_limits(self):
        summarizer = ExtractiveSummarizer(terse_chars=60, detailed_chars=80, section_chars=20)
        text = "## Topic\n\n" + "Sentence number one is here. " * 20

        terse, detailed = summarizer.summarize(text)

        assert len(terse) <= 60
        assert len(detailed) <= 80
        assert len(summarizer.summarize_section(text)) <= 20

    def test_empty_text(self):
        assert ExtractiveSummarizer().summarize("") == ("", "")
        assert ExtractiveSummarizer().summarize_section("") == ""


class TestLLMSummarizer:
    """Tests for LLMSummarizer with a mocked provider."""

    def make_provider(self, response):
        provider = Mock()
        provider.generate.return_value = response
        provider.provider_name = "MockProvider"
        provider.model = "mock-model"
        return provider

    def test_parses_terse_and_detailed(self):
        provider = self.make_provider("TERSE: retries, backoff, API key\nDETAILED: Explains setup.\nCovers retries.")

        terse, detailed = LLMSummarizer(provider).summarize("## Setup\n")

        assert terse == "retries, backoff, API key"
        assert detailed == "Explains setup. Covers retries."

    def test_detailed_defaults_to_terse(self):
        provider = self.make_provider("TERSE: only keywords")

        assert LLMSummarizer(provider).summarize("text") == ("only keywords", "only keywords")

    def test_missing_terse_block(self):
        provider = self.make_provider("Sure! Here is a summary of the file.")

        with pytest.raises(SummarizerError):
            LLMSummarizer(provider).summarize("text")

    def test_section_summary(self):
        provider = self.make_provider("  Describes the retry\nconfiguration.  ")

        assert LLMSummarizer(provider).summarize_section("## Retries\n") == "Describes the retry configuration."

    def test_input_is_clipped(self):
        provider = self.make_provider("TERSE: x")

        LLMSummarizer(provider, max_input_chars=10).summarize("a" * 20)

        prompt = provider.generate.call_args[0][0]
        assert "a" * 10 in prompt
        assert "a" * 11 not in prompt

    def test_system_prompt_sent(self):
        provider = self.make_provider("TERSE: x")

        LLMSummarizer(provider).summarize("text")

        assert provider.generate.call_args[1]["system_prompt"]

    def test_name_includes_model(self):
        assert LLMSummarizer(self.make_provider("")).name == "LLMSummarizer(MockProvider:mock-model)"


class TestCreateSummarizer:
    """Tests for the summarizer factory."""

    def test_extractive(self):
        assert isinstance(create_summarizer("extractive"), ExtractiveSummarizer)

    @patch("doc_search.summarizers.factory.create_llm_provider")
    def test_llm(self, mock_create):
        mock_create.return_value = Mock(provider_name="MockProvider", model="m")

        summarizer = create_summarizer("llm")

        assert isinstance(summarizer, LLMSummarizer)
        mock_create.assert_called_once()

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            create_summarizer("abstractive")
