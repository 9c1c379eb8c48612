"""
Config loading and saving.
"""

import json
import os
from pathlib import Path
from tgscribe.config.schema import Config


DEFAULT_CONFIG_PATH = Path("~/.tgscribe/config.json").expanduser()

# Conventional variable names, honoured when the prefixed ones are unset
ENV_FALLBACKS = {
    "TELEGRAM_BOT_TOKEN": ("telegram", "token"),
    "OPENAI_API_KEY": ("transcription", "api_key"),
}


def load_config(path: Path | None = None) -> Config:
    """
    Load configuration from JSON file and environment.

    Args:
        path: Config file path. Defaults to ~/.tgscribe/config.json

    Returns:
        Validated Config object.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    data = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

    config = Config(**data)
    _apply_env_fallbacks(config)
    return config


def _apply_env_fallbacks(config: Config) -> None:
    """Fill empty secrets from TELEGRAM_BOT_TOKEN / OPENAI_API_KEY."""
    for env_name, (section, field) in ENV_FALLBACKS.items():
        value = os.environ.get(env_name)
        target = getattr(config, section)
        if value and not getattr(target, field):
            setattr(target, field, value)


def save_config(config: Config, path: Path | None = None) -> None:
    """
    Save configuration to JSON file.

    Args:
        config: Config object to save
        path: Config file path. Defaults to ~/.tgscribe/config.json
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)
