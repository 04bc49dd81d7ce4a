from decimal import Decimal
from types import SimpleNamespace

import pytest
from cart.store import CART_STORAGE_KEY, CartStore
from common.notifications import CollectingNotifier
from common.storage import MemoryStorage
from orders.assembler import EmptyCartError, ShippingInput, UnauthenticatedError
from orders.checkout import CheckoutInProgressError, CheckoutService, flight_key_for
from orders.gateway import OrderSubmissionError
from users.identity import Identity

SHIPPING = ShippingInput(
    email="site@example.com",
    first_name="Sam",
    last_name="Builder",
    address="12 Quarry Road",
    city="Casablanca",
    phone="+212600000000",
)
IDENTITY = Identity(user_id=3, email="sam@example.com", token="header.payload.sig")


class RecordingGateway:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def submit(self, draft, credential):
        self.calls.append((draft, credential))
        if self.error is not None:
            raise self.error
        return {"id": 41, "number": "BM-000041", "client_reference": draft.client_draft_id}


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def store(storage):
    cart_store = CartStore(storage)
    product = SimpleNamespace(id=1, name="Rebar 12mm", sku="RB-12", price=Decimal("30.00"), vendor_ref="")
    cart_store.add_item(product, quantity=2)
    return cart_store


def test_successful_checkout_clears_cart(store, storage, notifier, settings):
    settings.STORE_COUNTRY = "Morocco"
    gateway = RecordingGateway()
    result = CheckoutService(store, gateway, notifier).place_order(SHIPPING, IDENTITY)

    draft, credential = gateway.calls[0]
    assert credential == IDENTITY.token
    assert result.order_number == "BM-000041"
    assert result.order_id == 41
    assert result.client_draft_id == draft.client_draft_id
    assert store.cart.is_empty
    assert storage.get(CART_STORAGE_KEY) is None
    assert notifier.as_list() == [{"level": "success", "message": "Order BM-000041 placed"}]


def test_failed_submission_keeps_cart(store, storage, notifier, settings):
    settings.STORE_COUNTRY = "Morocco"
    snapshot = storage.get(CART_STORAGE_KEY)
    gateway = RecordingGateway(OrderSubmissionError("Failed to create order", status_code=500))
    service = CheckoutService(store, gateway, notifier)

    with pytest.raises(OrderSubmissionError):
        service.place_order(SHIPPING, IDENTITY)

    assert storage.get(CART_STORAGE_KEY) == snapshot
    assert not store.cart.is_empty
    assert notifier.errors[0].message == "Failed to create order"
    assert service.in_flight is False


def test_unauthenticated_checkout_never_reaches_gateway(store):
    gateway = RecordingGateway()
    with pytest.raises(UnauthenticatedError):
        CheckoutService(store, gateway).place_order(SHIPPING, None)
    assert gateway.calls == []


def test_empty_cart_is_refused():
    gateway = RecordingGateway()
    with pytest.raises(EmptyCartError):
        CheckoutService(CartStore(MemoryStorage()), gateway).place_order(SHIPPING, IDENTITY)
    assert gateway.calls == []


def test_second_submission_while_in_flight_is_refused(store, settings):
    settings.STORE_COUNTRY = "Morocco"
    seen = {}

    class ReentrantGateway(RecordingGateway):
        def submit(self, draft, credential):
            seen["in_flight"] = service.in_flight
            with pytest.raises(CheckoutInProgressError) as exc:
                service.place_order(SHIPPING, IDENTITY)
            seen["status_code"] = exc.value.status_code
            return super().submit(draft, credential)

    gateway = ReentrantGateway()
    service = CheckoutService(store, gateway)
    service.place_order(SHIPPING, IDENTITY)

    assert seen == {"in_flight": True, "status_code": 409}
    assert len(gateway.calls) == 1
    assert service.in_flight is False


def test_cart_already_cleared_elsewhere_is_left_alone(store, storage, notifier, settings):
    settings.STORE_COUNTRY = "Morocco"

    class ClearingGateway(RecordingGateway):
        def submit(self, draft, credential):
            CartStore(storage).clear_cart()
            return super().submit(draft, credential)

    CheckoutService(store, ClearingGateway(), notifier).place_order(SHIPPING, IDENTITY)

    assert store.cart.is_empty
    assert [n.message for n in notifier.notifications] == ["Order BM-000041 placed"]


def test_services_sharing_a_flight_key_exclude_each_other(store, storage, settings):
    settings.STORE_COUNTRY = "Morocco"
    key = flight_key_for(IDENTITY.user_id)
    seen = {}

    class OtherWorkerGateway(RecordingGateway):
        def submit(self, draft, credential):
            other = CheckoutService(CartStore(storage), RecordingGateway(), flight_key=key)
            seen["in_flight"] = other.in_flight
            with pytest.raises(CheckoutInProgressError):
                other.place_order(SHIPPING, IDENTITY)
            return super().submit(draft, credential)

    service = CheckoutService(store, OtherWorkerGateway(), flight_key=key)
    service.place_order(SHIPPING, IDENTITY)

    assert seen == {"in_flight": True}
    assert service.in_flight is False
