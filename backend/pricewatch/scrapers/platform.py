"""Merchant detection from product URLs."""

from enum import Enum
from typing import List, Tuple


class MerchantId(str, Enum):
    """Supported merchants. ``UNKNOWN`` routes to the generic adapter."""

    AMAZON = "amazon"
    FLIPKART = "flipkart"
    MYNTRA = "myntra"
    AJIO = "ajio"
    SNAPDEAL = "snapdeal"
    TATACLIQ = "tatacliq"
    NYKAA = "nykaa"
    MEESHO = "meesho"
    JIOMART = "jiomart"
    CROMA = "croma"
    RELIANCE_DIGITAL = "reliancedigital"
    UNKNOWN = "unknown"


# Ordered (substring, merchant) rules; first match wins.
PLATFORM_RULES: List[Tuple[str, MerchantId]] = [
    ("amazon", MerchantId.AMAZON),
    ("flipkart", MerchantId.FLIPKART),
    ("myntra", MerchantId.MYNTRA),
    ("ajio", MerchantId.AJIO),
    ("snapdeal", MerchantId.SNAPDEAL),
    ("tatacliq", MerchantId.TATACLIQ),
    ("nykaa", MerchantId.NYKAA),
    ("meesho", MerchantId.MEESHO),
    ("jiomart", MerchantId.JIOMART),
    ("croma", MerchantId.CROMA),
    ("reliancedigital", MerchantId.RELIANCE_DIGITAL),
]


def detect_platform(url: str) -> MerchantId:
    """Map a product URL to its merchant.

    Args:
        url: Product page URL (any case)

    Returns:
        Matching MerchantId, or MerchantId.UNKNOWN
    """
    if not url:
        return MerchantId.UNKNOWN

    lowered = url.lower()
    for substring, merchant in PLATFORM_RULES:
        if substring in lowered:
            return merchant
    return MerchantId.UNKNOWN
