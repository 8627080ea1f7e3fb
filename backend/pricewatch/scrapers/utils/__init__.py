"""Scraper utilities for price parsing, request headers and retries."""

from .normalizer import PriceNormalizer, CURRENCY_PRICE_PATTERN
from .user_agents import (
    get_random_user_agent,
    get_chrome_user_agent,
    build_browser_headers,
    USER_AGENTS,
)
from .retry import browser_launch_retry


__all__ = [
    # Normalization
    "PriceNormalizer",
    "CURRENCY_PRICE_PATTERN",
    # User agents
    "get_random_user_agent",
    "get_chrome_user_agent",
    "build_browser_headers",
    "USER_AGENTS",
    # Retry decorators
    "browser_launch_retry",
]
