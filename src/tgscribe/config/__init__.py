"""Configuration management."""

from tgscribe.config.schema import Config
from tgscribe.config.loader import load_config, save_config

__all__ = ["Config", "load_config", "save_config"]
