"""
Order pricing.

A total is ``(base price + delivery adjustment) * total images`` where the
base price depends on the service and the complexity tier, and the
adjustment on the requested turnaround.
"""

from typing import Iterable, Optional

from schemas import OrderFile, Quote, Service

DEFAULT_DELIVERY_TIME = "48"

DELIVERY_TIMES = [
    {"hours": 3, "adjustment": 2.0, "label": "3 hours (+$2.0/image)"},
    {"hours": 6, "adjustment": 1.0, "label": "6 hours (+$1.0/image)"},
    {"hours": 12, "adjustment": 0.75, "label": "12 hours (+$0.75/image)"},
    {"hours": 24, "adjustment": 0.50, "label": "24 hours (+$0.50/image)"},
    {"hours": 36, "adjustment": 0.0, "label": "36 hours (+$0.00/image)"},
    {"hours": 48, "adjustment": 0.0, "label": "48 hours (Recommended)"},
    {"hours": 60, "adjustment": 0.0, "label": "60 hours (+$0.00/image)"},
    {"hours": 72, "adjustment": -0.10, "label": "72 hours (-$0.10/image)"},
    {"hours": 84, "adjustment": -0.15, "label": "84 hours (-$0.15/image)"},
    {"hours": 96, "adjustment": -0.20, "label": "96 hours (-$0.20/image)"},
]

_ADJUSTMENTS = {t["hours"]: t["adjustment"] for t in DELIVERY_TIMES}

PRICE_FIELDS = {
    "basic": "basic_price",
    "medium": "medium_price",
    "complex": "complex_price",
    "superComplex": "super_complex_price",
}


def delivery_adjustment(delivery_time) -> float:
    """Per-image delta for a turnaround in hours; 0 for anything not in the table."""
    try:
        hours = int(delivery_time)
    except (TypeError, ValueError):
        return 0.0
    return _ADJUSTMENTS.get(hours, 0.0)


def base_price(service: Optional[Service], complexity: str) -> float:
    # unresolved service or unknown tier prices at 0
    if service is None:
        return 0.0
    field = PRICE_FIELDS.get(complexity)
    if field is None:
        return 0.0
    return float(getattr(service, field))


def total_images(files: Iterable[OrderFile]) -> int:
    return sum(f.image_count or 1 for f in files)


def quote(service: Optional[Service], complexity: str, delivery_time, files: Iterable[OrderFile]) -> Quote:
    files = list(files)
    price = base_price(service, complexity)
    adjustment = delivery_adjustment(delivery_time)
    images = total_images(files)
    rate = max(price + adjustment, 0.0)
    base_total = round(price * images, 2)
    total = round(rate * images, 2)
    # a discount never takes the total below zero
    return Quote(
        base_price=price,
        delivery_adjustment=adjustment,
        total_images=images,
        base_total=base_total,
        adjustment_total=round(total - base_total, 2),
        total_price=total,
    )


def compute_total(service: Optional[Service], complexity: str, delivery_time, files: Iterable[OrderFile]) -> float:
    return quote(service, complexity, delivery_time, files).total_price
