"""Document adapters: one configured SelectorAdapter per merchant plus GenericAdapter."""

from .selector import SelectorAdapter, absolutize_image_url
from .generic import GenericAdapter
from .merchants import MERCHANT_ADAPTERS

__all__ = [
    "SelectorAdapter",
    "GenericAdapter",
    "MERCHANT_ADAPTERS",
    "absolutize_image_url",
]
