"""Core types shared across layers."""

from opentv.core.types import EPISODE, Filters, MediaType, SourceType, ViewType

__all__ = [
    "EPISODE",
    "Filters",
    "MediaType",
    "SourceType",
    "ViewType",
]
