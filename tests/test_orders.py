import mongomock
import pytest
from pymongo.errors import PyMongoError

import orders
from errors import Forbidden, NotFound, StorageError, Unauthorized, ValidationError
from tests.conftest import order_payload


def test_submit_requires_caller(storage, service):
    with pytest.raises(Unauthorized):
        orders.submit_order(storage, order_payload(service.id), None)
    assert storage.get_orders() == []


def test_submit_persists_pending_order(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    assert order.id
    assert order.status == "pending"
    assert order.customer_id == customer.id
    assert order.total_price == pytest.approx(27.50)
    assert order.created_at is not None
    assert storage.get_order(order.id).order_name == "Spring catalog"


def test_server_fields_are_ignored(storage, service, customer):
    payload = order_payload(
        service.id, id=999, customer_id=12345, status="completed",
        created_at="2001-01-01T00:00:00", total_price=0.01,
    )
    order = orders.submit_order(storage, payload, customer.id)
    assert order.id != 999
    assert order.customer_id == customer.id
    assert order.status == "pending"
    assert order.total_price == pytest.approx(27.50)


def test_addons_are_deduplicated(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id, addons=["shadow", "shadow", "resize"]), customer.id)
    assert order.addons == ["shadow", "resize"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"complexity": "extreme"},
        {"files": []},
        {"files": [{"path": "a.jpg", "image_count": 0}]},
        {"order_name": ""},
        {"service_id": "not-a-number"},
    ],
)
def test_malformed_payload(storage, service, customer, overrides):
    with pytest.raises(ValidationError):
        orders.submit_order(storage, order_payload(service.id, **overrides), customer.id)
    assert storage.get_orders() == []


def test_payload_must_be_an_object(storage, customer):
    with pytest.raises(ValidationError):
        orders.submit_order(storage, ["not", "an", "order"], customer.id)


def test_unknown_service_is_rejected(storage, customer):
    with pytest.raises(ValidationError):
        orders.submit_order(storage, order_payload(404), customer.id)


def test_storage_failure_leaves_no_order(storage, service, customer, monkeypatch):
    def boom(self, *args, **kwargs):
        raise PyMongoError("disk full")

    monkeypatch.setattr(mongomock.Collection, "insert_one", boom)
    with pytest.raises(StorageError):
        orders.submit_order(storage, order_payload(service.id), customer.id)
    monkeypatch.undo()
    assert storage.get_orders() == []


def test_customers_only_see_their_orders(storage, service, customer, editor):
    from auth import register

    other = register(storage, "olga", "pw")
    mine = orders.submit_order(storage, order_payload(service.id), customer.id)
    orders.submit_order(storage, order_payload(service.id), other.id)

    assert [o.id for o in orders.list_orders(storage, customer)] == [mine.id]
    assert len(orders.list_orders(storage, editor)) == 2
    with pytest.raises(Unauthorized):
        orders.list_orders(storage, None)


@pytest.mark.parametrize("status", ["pending", "processing", "completed"])
def test_customer_cannot_change_status(storage, service, customer, status):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    with pytest.raises(Forbidden):
        orders.set_order_status(storage, order.id, status, "customer")
    assert storage.get_order(order.id).status == "pending"


def test_anonymous_cannot_change_status(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    with pytest.raises(Forbidden):
        orders.set_order_status(storage, order.id, "processing", None)


@pytest.mark.parametrize("role", ["editor", "admin"])
def test_staff_change_status(storage, service, customer, role):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    updated = orders.set_order_status(storage, order.id, "processing", role)
    assert updated.status == "processing"
    assert updated.total_price == order.total_price


def test_status_changes_are_unrestricted(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    assert orders.set_order_status(storage, order.id, "completed", "editor").status == "completed"
    assert orders.set_order_status(storage, order.id, "pending", "editor").status == "pending"


def test_unknown_order(storage):
    with pytest.raises(NotFound):
        orders.set_order_status(storage, 42, "completed", "admin")


def test_invalid_status(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    with pytest.raises(ValidationError):
        orders.set_order_status(storage, order.id, "shipped", "admin")


def test_returned_order_matches_stored(storage, service, customer):
    order = orders.submit_order(storage, order_payload(service.id), customer.id)
    stored = storage.get_order(order.id)
    assert order.created_at == stored.created_at
    assert order == stored
    assert order.created_at.microsecond % 1000 == 0
