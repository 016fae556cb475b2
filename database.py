"""
MongoDB access for the order service.

``Storage`` wraps one database handle. It is created by the process entry
point and passed to every operation; nothing here is module-global.
"""

import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from errors import AlreadyExists, NotFound, StorageError
from schemas import Order, Service, UserInDB

logger = logging.getLogger(__name__)


def get_database():
    url = os.getenv("DATABASE_URL", "mongodb://localhost:27017")
    name = os.getenv("DATABASE_NAME", "photo_orders")
    client = MongoClient(url, tz_aware=True)
    return client[name]


def to_dict(doc):
    if not doc:
        return doc
    d = dict(doc)
    if "_id" in d:
        d["id"] = d.pop("_id")
    return d


@contextmanager
def _guard(action):
    try:
        yield
    except PyMongoError as e:
        logger.error("%s failed: %s", action, e)
        raise StorageError(f"Could not {action}") from e


class Storage:
    def __init__(self, db):
        self.db = db
        self.client = db.client

    @classmethod
    def from_env(cls):
        return cls(get_database())

    def close(self):
        self.client.close()

    def ensure_indexes(self):
        with _guard("create indexes"):
            self.db["user"].create_index([("username", ASCENDING)], unique=True)
            self.db["order"].create_index([("customer_id", ASCENDING)])

    def ping(self) -> List[str]:
        with _guard("reach the database"):
            return self.db.list_collection_names()[:10]

    def _next_id(self, collection: str) -> int:
        counter = self.db["counters"].find_one_and_update(
            {"_id": collection},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    # Users

    def get_user(self, user_id: int) -> Optional[UserInDB]:
        with _guard("load user"):
            doc = self.db["user"].find_one({"_id": user_id})
        return UserInDB(**to_dict(doc)) if doc else None

    def get_user_by_username(self, username: str) -> Optional[UserInDB]:
        with _guard("load user"):
            doc = self.db["user"].find_one({"username": username})
        return UserInDB(**to_dict(doc)) if doc else None

    def create_user(self, username: str, password: str, role: str = "customer") -> UserInDB:
        doc = {"username": username, "password": password, "role": role}
        with _guard("create user"):
            doc["_id"] = self._next_id("user")
            try:
                self.db["user"].insert_one(doc)
            except DuplicateKeyError as e:
                raise AlreadyExists("Username already exists") from e
        return UserInDB(**to_dict(doc))

    # Orders

    def create_order(self, order: Dict[str, Any]) -> Order:
        now = datetime.now(timezone.utc)
        # MongoDB stores milliseconds
        created_at = now.replace(microsecond=now.microsecond // 1000 * 1000)
        doc = {**order, "status": "pending", "created_at": created_at}
        with _guard("create order"):
            doc["_id"] = self._next_id("order")
            self.db["order"].insert_one(doc)
            stored = self.db["order"].find_one({"_id": doc["_id"]})
        return Order(**to_dict(stored))

    def get_order(self, order_id: int) -> Optional[Order]:
        with _guard("load order"):
            doc = self.db["order"].find_one({"_id": order_id})
        return Order(**to_dict(doc)) if doc else None

    def get_orders(self, customer_id: Optional[int] = None) -> List[Order]:
        query = {} if customer_id is None else {"customer_id": customer_id}
        with _guard("list orders"):
            docs = list(self.db["order"].find(query).sort("_id", DESCENDING))
        return [Order(**to_dict(d)) for d in docs]

    def update_order_status(self, order_id: int, status: str) -> Order:
        with _guard("update order"):
            doc = self.db["order"].find_one_and_update(
                {"_id": order_id},
                {"$set": {"status": status}},
                return_document=ReturnDocument.AFTER,
            )
        if not doc:
            raise NotFound("Order not found")
        return Order(**to_dict(doc))

    # Services

    def get_services(self) -> List[Service]:
        with _guard("list services"):
            docs = list(self.db["service"].find().sort("_id", ASCENDING))
        return [Service(**to_dict(d)) for d in docs]

    def get_service(self, service_id: int) -> Optional[Service]:
        with _guard("load service"):
            doc = self.db["service"].find_one({"_id": service_id})
        return Service(**to_dict(doc)) if doc else None

    def create_service(self, fields: Dict[str, Any]) -> Service:
        doc = dict(fields)
        with _guard("create service"):
            doc["_id"] = self._next_id("service")
            self.db["service"].insert_one(doc)
        return Service(**to_dict(doc))

    def update_service(self, service_id: int, updates: Dict[str, Any]) -> Service:
        with _guard("update service"):
            if updates:
                doc = self.db["service"].find_one_and_update(
                    {"_id": service_id},
                    {"$set": updates},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                doc = self.db["service"].find_one({"_id": service_id})
        if not doc:
            raise NotFound("Service not found")
        return Service(**to_dict(doc))

    def seed_services(self, services: List[Dict[str, Any]]) -> int:
        with _guard("seed services"):
            if self.db["service"].count_documents({}) > 0:
                return 0
        for s in services:
            self.create_service(s)
        logger.info("Seeded %d services", len(services))
        return len(services)
