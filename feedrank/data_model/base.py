"""Base model shared by content items and ranking configuration."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Frozen model that rejects unknown fields.

    Content items and configuration are read-only once loaded; changes
    go through the store or a new configuration version.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
