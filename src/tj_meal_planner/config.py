"""
Runtime configuration for the meal planner.

Values come from the environment (optionally a .env file at the repo root
or in the working directory).
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import find_dotenv, load_dotenv


def load_env_files() -> None:
    """Load .env from a source checkout, then from the working directory.

    Neither file overrides variables that are already set.
    """
    load_dotenv(Path(__file__).resolve().parents[2] / ".env")
    load_dotenv(find_dotenv(usecwd=True))


load_env_files()


def _env(name: str, default: str, cast=str):
    return field(default_factory=lambda: cast(os.getenv(name, default)))


def _env_bool(name: str, default: str):
    return field(default_factory=lambda: os.getenv(name, default).lower() == "true")


@dataclass(frozen=True)
class Settings:
    # Generative service
    chat_model: str = _env("CHAT_MODEL", "gpt-4")
    term_temperature: float = _env("TERM_TEMPERATURE", "0.7", float)
    selection_temperature: float = _env("SELECTION_TEMPERATURE", "0.5", float)
    plan_temperature: float = _env("PLAN_TEMPERATURE", "0.7", float)
    generation_timeout: float = _env("GENERATION_TIMEOUT", "60", float)

    # Retailer product search
    trader_joes_url: str = _env("TRADER_JOES_URL", "https://www.traderjoes.com/api/graphql")
    store_code: str = _env("TRADER_JOES_STORE_CODE", "130")
    page_size: int = _env("RETAILER_PAGE_SIZE", "15", int)
    retailer_timeout: float = _env("RETAILER_TIMEOUT", "30", float)
    retailer_concurrency: int = _env("RETAILER_CONCURRENCY", "4", int)

    # Output
    cli_mode: bool = _env_bool("CLI_MODE", "true")
    log_level: str = _env("LOG_LEVEL", "WARNING")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
