"""Application settings loading."""

from .app import RankingSettings, get_settings


__all__ = ["RankingSettings", "get_settings"]
