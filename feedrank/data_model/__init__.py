"""Shared data model primitives."""

from feedrank.data_model.base import StrictBaseModel


__all__ = ["StrictBaseModel"]
