"""Services module for business logic and data operations.

Services own the database session they are given and implement price
checks, alert evaluation and product/alert bookkeeping.
"""

from pricewatch.services.alert_evaluator import AlertEvaluator
from pricewatch.services.alert_service import AlertService
from pricewatch.services.price_check_service import PriceCheckOutcome, PriceCheckService
from pricewatch.services.product_service import ProductService

__all__ = [
    "AlertEvaluator",
    "AlertService",
    "PriceCheckOutcome",
    "PriceCheckService",
    "ProductService",
]
