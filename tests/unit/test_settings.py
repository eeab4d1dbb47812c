"""
Tests for Settings configuration class.
"""

import os

import pytest
from pydantic import ValidationError

from doc_search.config import Settings, settings


class TestSettings:
    """Tests for Settings class."""

    def test_settings_instance_exists(self):
        """Test that global settings instance exists."""
        assert settings is not None
        assert isinstance(settings, Settings)

    def test_collection_layout(self):
        """Test index file name defaults."""
        assert settings.index_filename == "index.jsonl"
        assert settings.sections_filename == "sections.jsonl"
        assert "*.md" in settings.include_patterns

    def test_build_defaults(self):
        """Test build configuration defaults."""
        assert settings.heading_depth in (2, 3)
        assert settings.summarizer_timeout > 0
        assert settings.summary_max_chars >= 50

    def test_llm_settings(self):
        """Test LLM configuration defaults."""
        assert settings.llm_provider in ["ollama", "anthropic"]
        assert isinstance(settings.llm_model, str)
        assert settings.llm_temperature >= 0.0
        assert settings.llm_max_tokens > 0
        assert settings.llm_timeout > 0

    def test_environment_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("HEADING_DEPTH", "3")
        monkeypatch.setenv("MAX_PICKS", "4")

        fresh = Settings()

        assert fresh.heading_depth == 3
        assert fresh.max_picks == 4

    @pytest.mark.parametrize("depth", ["1", "4"])
    def test_heading_depth_bounds(self, monkeypatch, depth):
        monkeypatch.setenv("HEADING_DEPTH", depth)

        with pytest.raises(ValidationError):
            Settings()

    def test_resolved_workers(self):
        assert Settings(max_workers=3).resolved_workers() == 3
        assert Settings(max_workers=None).resolved_workers() == (os.cpu_count() or 1)

    def test_read_retry_settings(self):
        """Test bounds on re-reads of an index pair caught mid-swap."""
        assert settings.read_retry_attempts >= 1
        assert settings.read_retry_wait >= 0

        with pytest.raises(ValidationError):
            Settings(read_retry_attempts=0)
