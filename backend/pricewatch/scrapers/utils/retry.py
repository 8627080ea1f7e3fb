"""Retry policies with exponential backoff."""

import logging

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)
import structlog
from playwright.async_api import Error as PlaywrightError


logger = structlog.get_logger(__name__)


# Chromium occasionally fails to come up on a cold container; one more try
# separates a flaky start from a broken install.
browser_launch_retry = retry(
    stop=stop_after_attempt(2),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    retry=retry_if_exception_type((PlaywrightError, OSError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
