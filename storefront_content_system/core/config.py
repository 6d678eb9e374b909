"""
Runtime settings.
Loaded from an optional JSON config file, then overridden by environment variables.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("Config")

DEFAULT_CONFIG_PATH = "config/content_config.json"

# env var -> settings field
_ENV_FIELDS = {
    "MISTRAL_API_KEY": "mistral_api_key",
    "CONTENT_MODEL": "model",
    "CONTENT_TEMPERATURE": "temperature",
    "PROMPT_VARIANT": "prompt_variant",
    "GENERATION_INTERVAL_SECONDS": "generation_interval_seconds",
    "SCHEDULER_TICK_SECONDS": "scheduler_tick_seconds",
    "SCHEDULER_INITIAL_DELAY_SECONDS": "scheduler_initial_delay_seconds",
    "POLL_MAX_ATTEMPTS": "poll_max_attempts",
    "POLL_INTERVAL_SECONDS": "poll_interval_seconds",
    "CONTENT_STORE_DIR": "content_store_dir",
    "LOCAL_CACHE_PATH": "local_cache_path",
    "LOG_DIR": "log_dir",
}


class Settings(BaseModel):
    """Pipeline configuration with validated defaults."""

    mistral_api_key: Optional[str] = None
    model: str = "mistral-small-latest"
    temperature: float = Field(0.5, ge=0, le=1)
    prompt_variant: str = "marked"

    generation_interval_seconds: float = Field(20 * 60, gt=0)
    scheduler_tick_seconds: float = Field(60, gt=0)
    scheduler_initial_delay_seconds: float = Field(5, ge=0)

    poll_max_attempts: int = Field(15, ge=1)
    poll_interval_seconds: float = Field(2.0, gt=0)

    content_store_dir: str = "data/generated_content"
    local_cache_path: str = "data/local_cache.json"
    log_dir: str = "logs"

    @field_validator("prompt_variant")
    @classmethod
    def validate_variant(cls, v):
        v = v.lower()
        if v not in ("marked", "plain"):
            raise ValueError(f"Unknown prompt variant: {v}")
        return v


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Build settings from the JSON config file (if present) and the environment.
    Config path can be overridden via CONTENT_CONFIG env variable.
    """
    path = Path(config_path or os.getenv("CONTENT_CONFIG", DEFAULT_CONFIG_PATH))

    data = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info(f"Loaded config from {path}")

    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(env_name)
        if value is not None and value != "":
            data[field_name] = value

    return Settings(**data)
