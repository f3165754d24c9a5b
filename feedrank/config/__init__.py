"""Externalized ranking configuration."""

from feedrank.config.loader import ConfigValidationError, load_ranking_config


__all__ = ["ConfigValidationError", "load_ranking_config"]
