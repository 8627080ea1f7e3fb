"""Custom exception classes for the application."""


class PriceWatchException(Exception):
    """Base exception for all PriceWatch errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(PriceWatchException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ScraperError(PriceWatchException):
    """Raised when a scraper encounters an error."""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        super().__init__(f"Scraper error for {platform}: {message}")


class RenderEngineError(ScraperError):
    """Raised when the headless browser cannot be started.

    This points at environment misconfiguration (missing Chromium, sandbox
    restrictions) rather than a problem with the page being scraped, so it
    is surfaced to callers instead of degrading to a placeholder result.
    """

    def __init__(self, message: str):
        super().__init__("chromium", message)


class NotifierError(PriceWatchException):
    """Raised when a notification transport fails."""

    def __init__(self, transport: str, message: str):
        self.transport = transport
        super().__init__(f"Notifier error ({transport}): {message}")
