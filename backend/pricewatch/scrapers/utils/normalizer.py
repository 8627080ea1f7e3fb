"""Price string parsing utilities."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

# First number in a string, with optional thousands separators (Western
# or Indian grouping) and an optional decimal part.
_NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")

# Currency symbol or ISO code followed by a number, e.g. "₹1,299", "Rs. 499", "USD 20".
# Letter markers need a word boundary so "stars 1,024" is not read as "Rs 1,024".
CURRENCY_PRICE_PATTERN = re.compile(
    r"(?:₹|\$|€|£|\b(?:Rs\.?|INR|USD|EUR|GBP))\s*(\d[\d,]*(?:\.\d+)?)",
    re.IGNORECASE,
)


class PriceNormalizer:
    """Price parsing helpers shared by every extraction strategy."""

    @staticmethod
    def clean_price_string(raw: str) -> Optional[Decimal]:
        """Parse a price string and extract numeric value.

        Handles various formats:
        - "₹1,299" -> 1299
        - "Rs. 1,29,999.00" -> 129999.00
        - "$12.99" -> 12.99
        - "1,299." -> 1299

        Args:
            raw: Raw price string

        Returns:
            Decimal price value, or None if parsing fails
        """
        if not raw:
            return None

        match = _NUMBER_PATTERN.search(raw)
        if not match:
            return None

        cleaned = match.group(0).replace(",", "")
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    @staticmethod
    def extract_currency_price(text: str) -> Optional[Decimal]:
        """Find the first currency-prefixed positive price in free text.

        Args:
            text: Text containing price information (e.g. a page body)

        Returns:
            Extracted price as Decimal, or None if not found
        """
        if not text:
            return None

        for match in CURRENCY_PRICE_PATTERN.finditer(text):
            price = PriceNormalizer.clean_price_string(match.group(1))
            if price and price > 0:
                return price

        return None
