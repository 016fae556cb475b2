"""
Service catalog: listing, admin edits and the default seed data.
"""

import logging
from typing import Any, Dict, List, Optional

import pydantic

from auth import require_role
from database import Storage
from errors import ValidationError
from schemas import Service, ServiceUpdate

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    {
        "name": "Clipping Path",
        "description": "Hand-drawn paths to cut the subject out of its background.",
        "basic_price": 0.39,
        "medium_price": 0.99,
        "complex_price": 2.49,
        "super_complex_price": 4.99,
    },
    {
        "name": "Background Removal",
        "description": "Replace the background with white, transparent or a color of your choice.",
        "basic_price": 0.49,
        "medium_price": 1.19,
        "complex_price": 2.99,
        "super_complex_price": 5.49,
    },
    {
        "name": "Image Retouching",
        "description": "Skin, product and blemish retouching for e-commerce and portraits.",
        "basic_price": 1.49,
        "medium_price": 2.99,
        "complex_price": 4.99,
        "super_complex_price": 7.99,
    },
    {
        "name": "Color Correction",
        "description": "White balance, exposure and color matching across a set.",
        "basic_price": 0.79,
        "medium_price": 1.49,
        "complex_price": 2.49,
        "super_complex_price": 3.99,
    },
    {
        "name": "Ghost Mannequin",
        "description": "Remove the mannequin and join front and back shots for apparel.",
        "basic_price": 1.99,
        "medium_price": 3.49,
        "complex_price": 5.49,
        "super_complex_price": 8.49,
    },
]


def list_services(storage: Storage) -> List[Service]:
    return storage.get_services()


def update_service(storage: Storage, service_id: int, changes: Dict[str, Any], caller_role: Optional[str]) -> Service:
    require_role(caller_role, "admin")
    try:
        update = ServiceUpdate.model_validate(changes)
    except pydantic.ValidationError as e:
        raise ValidationError(str(e)) from e
    updates = {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}
    service = storage.update_service(service_id, updates)
    if updates:
        logger.info("Service %s updated: %s", service_id, ", ".join(sorted(updates)))
    return service
