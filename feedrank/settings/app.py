"""Ranking engine settings powered by Pydantic BaseSettings."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RankingSettings(BaseSettings):
    """Environment configuration for cache windows and feed sizes.

    Score weights and the authority table are not settings; they are part
    of the algorithm version (see feedrank.ranker.constants).
    """

    model_config = SettingsConfigDict(
        env_prefix="FEEDRANK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    distribution_ttl_seconds: Annotated[int, Field(ge=1)] = 3600
    trending_ttl_seconds: Annotated[int, Field(ge=1)] = 300
    hero_ttl_seconds: Annotated[int, Field(ge=1)] = 600

    feed_limit: Annotated[int, Field(ge=1)] = 50
    trending_limit: Annotated[int, Field(ge=1)] = 10
    trending_window_hours: Annotated[int, Field(ge=1)] = 24
    trending_min_views: Annotated[int, Field(ge=0)] = 10
    trending_min_likes: Annotated[int, Field(ge=0)] = 2
    hero_limit: Annotated[int, Field(ge=1)] = 3
    hero_window_days: Annotated[int, Field(ge=1)] = 7
    hero_min_score: Annotated[float, Field(ge=0.0, le=10.0)] = 7.0

    log_level: str = "INFO"
    log_json: bool = True
    database_path: str | None = None
    ranking_config_path: str | None = None


def get_settings() -> RankingSettings:
    """Get a settings instance."""
    return RankingSettings()
