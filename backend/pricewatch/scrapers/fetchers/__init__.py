"""Fetch tiers, ordered from cheapest to most expensive."""

from .fast import FastFetchTier
from .rendered import RenderedFetchTier

__all__ = ["FastFetchTier", "RenderedFetchTier"]
