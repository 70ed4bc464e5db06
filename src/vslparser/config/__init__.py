"""Configuration loading for vslparser."""

from vslparser.config.loader import load_config

__all__ = ["load_config"]
