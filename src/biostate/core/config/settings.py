"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """BioState research server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the tools.
    biostate_host: str = "127.0.0.1"
    biostate_port: int = 8001
    biostate_log_level: str = "info"
    biostate_allow_insecure_bind: bool = False

    # Generation provider
    llm_provider: Literal["gemini", "anthropic", "openai", "mock"] = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # Default sampling
    default_temperature: float = 0.4
    default_top_p: float = 0.9

    # Storage (research store)
    db_path: str = "~/.biostate/research.db"

    # Encryption
    encryption_key: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
