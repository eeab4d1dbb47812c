"""
Configuration module using pydantic-settings.

All configuration loaded from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Load from .env file or environment variables.
    """

    # Collection layout
    index_filename: str = "index.jsonl"
    sections_filename: str = "sections.jsonl"
    include_patterns: List[str] = ["*.md", "*.markdown"]

    # Segmentation
    heading_depth: int = Field(default=2, ge=2, le=3)  # 2 = "##" only, 3 = "##" and "###"

    # Build settings
    max_workers: Optional[int] = Field(default=None, ge=1)  # None = CPU count
    summarizer: str = "extractive"  # "extractive" or "llm"
    summarizer_timeout: float = Field(default=120.0, gt=0)  # Seconds per file
    summary_max_chars: int = Field(default=250, ge=50)

    # Query settings
    preview_lines: int = Field(default=5, ge=1)  # index.jsonl lines read at discovery
    max_picks: int = Field(default=10, ge=1)  # Upper bound on ranker picks
    read_retry_attempts: int = Field(default=5, ge=1)  # Reads of a pair caught mid-swap
    read_retry_wait: float = Field(default=0.05, ge=0)  # Seconds between those reads

    # LLM settings (used by the "llm" summarizer)
    llm_provider: str = "ollama"  # "ollama" or "anthropic"
    llm_model: str = "qwen2.5-coder:7b"
    llm_base_url: str = "http://localhost:11434"  # Ollama base URL
    llm_temperature: float = 0.0  # Deterministic generation
    llm_max_tokens: int = 1000
    llm_rate_limit: float = 1.0  # Requests per second for external APIs
    llm_timeout: int = 120  # Request timeout in seconds

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def resolved_workers(self) -> int:
        """Effective worker pool size for builds"""
        return self.max_workers or os.cpu_count() or 1


# Global settings instance
settings = Settings()
