from datetime import datetime, timedelta

import pytest

from coingift.common.errors import (
    MSG_ALREADY_REGISTERED,
    MSG_INVALID_CODE,
    Forbidden,
    NotFound,
    StateConflict,
    ValidationFailed,
)
from coingift.models.gift import Gift, GiftCreate, GiftStatus, GiftUpdate
from coingift.models.payment import PaymentCreate
from coingift.services import gift_service as gift_service_module
from coingift.services.gift_service import GiftService
from coingift.services.gift_store import SqlGiftStore
from coingift.services.payment_service import PaymentService


@pytest.fixture
def store(db):
    return SqlGiftStore(db)


@pytest.fixture
def service(store, clock):
    return GiftService(store, clock=clock)


def _create(service, **overrides):
    data = dict(amount=10000, sender_name="A", receiver_name="B", sender_phone="010-1")
    data.update(overrides)
    return service.create_gift(GiftCreate(**data))


def _pay(store, gift):
    payments = PaymentService(store)
    payment = payments.create_payment(PaymentCreate(gift_id=gift.id, amount=gift.amount))
    payments.complete_payment(payment.id)
    return payment


def test_create_gift_starts_pending_with_fixed_expiry(service, clock):
    gift = _create(service)
    assert gift.status == GiftStatus.PENDING
    assert gift.created_at == clock.now
    assert gift.expires_at == clock.now + timedelta(days=30)
    assert gift.registered_at is None


def test_create_gift_codes_are_unique(service):
    codes = {_create(service).code for _ in range(25)}
    assert len(codes) == 25


@pytest.mark.parametrize("overrides", [
    {"amount": 500},
    {"amount": 999},
    {"amount": 10_000_001},
    {"amount": None},
    {"sender_name": "  "},
    {"receiver_name": ""},
])
def test_create_gift_validation_writes_nothing(service, store, overrides):
    with pytest.raises(ValidationFailed):
        _create(service, **overrides)
    assert store.list() == []


def test_create_gift_retries_on_code_collision(service, store, monkeypatch):
    existing = _create(service)
    fresh = iter([existing.code, "ZZZZ-ZZZZ-ZZZZ"])
    monkeypatch.setattr(gift_service_module.codes, "generate", lambda: next(fresh))
    gift = _create(service)
    assert gift.code == "ZZZZ-ZZZZ-ZZZZ"


def test_create_gift_gives_up_after_max_attempts(service, monkeypatch):
    existing = _create(service)
    monkeypatch.setattr(gift_service_module.codes, "generate", lambda: existing.code)
    with pytest.raises(StateConflict):
        _create(service)


def test_redeem_marks_registered_once(service, store, clock):
    gift = _create(service)
    _pay(store, gift)

    redeemed = service.redeem(gift.code.lower().replace("-", " "))
    assert redeemed.status == GiftStatus.REGISTERED
    assert redeemed.registered_at == clock.now

    with pytest.raises(StateConflict) as exc_info:
        service.redeem(gift.code)
    assert exc_info.value.message == MSG_ALREADY_REGISTERED
    assert store.get_by_id(gift.id).registered_at == clock.now


def test_redeem_unknown_code(service):
    with pytest.raises(NotFound) as exc_info:
        service.redeem("AAAA-BBBB-CCCC")
    assert exc_info.value.message == MSG_INVALID_CODE


def test_redeem_lost_race_reports_already_registered(service, store, monkeypatch):
    gift = _create(service)
    _pay(store, gift)

    original = store.compare_and_set_status

    def racing_cas(gift_id, expected, new, **fields):
        # another request wins between our read and our write
        original(gift_id, expected, new, **fields)
        return False

    monkeypatch.setattr(store, "compare_and_set_status", racing_cas)
    with pytest.raises(StateConflict) as exc_info:
        service.redeem(gift.code)
    assert exc_info.value.message == MSG_ALREADY_REGISTERED


def test_compare_and_set_only_matches_expected_status(service, store):
    gift = _create(service)
    assert not store.compare_and_set_status(gift.id, GiftStatus.PAID, GiftStatus.REGISTERED)
    assert store.get_by_id(gift.id).status == GiftStatus.PENDING
    assert store.compare_and_set_status(gift.id, GiftStatus.PENDING, GiftStatus.PAID)
    assert store.get_by_id(gift.id).status == GiftStatus.PAID


def test_sweep_refunds_paid_and_expires_pending(service, store, clock):
    paid = _create(service)
    _pay(store, paid)
    pending = _create(service)
    registered = _create(service)
    _pay(store, registered)
    service.redeem(registered.code)

    clock.advance(days=30)
    result = service.sweep()

    assert result == {GiftStatus.REFUNDED: 1, GiftStatus.EXPIRED: 1}
    assert store.get_by_id(paid.id).status == GiftStatus.REFUNDED
    assert store.get_by_id(pending.id).status == GiftStatus.EXPIRED
    assert store.get_by_id(registered.id).status == GiftStatus.REGISTERED


def test_sweep_before_expiry_changes_nothing(service, store, clock):
    gift = _create(service)
    _pay(store, gift)
    clock.advance(days=29, hours=23)
    assert service.sweep() == {GiftStatus.REFUNDED: 0, GiftStatus.EXPIRED: 0}
    assert store.get_by_id(gift.id).status == GiftStatus.PAID


def test_thank_you_only_once_and_only_when_registered(service, store):
    gift = _create(service)
    with pytest.raises(StateConflict):
        service.update_gift(gift.id, GiftUpdate(thank_you_message="고마워"))

    _pay(store, gift)
    service.redeem(gift.code)
    updated = service.update_gift(gift.id, GiftUpdate(thank_you_message="고마워"))
    assert updated.thank_you_message == "고마워"

    with pytest.raises(StateConflict):
        service.update_gift(gift.id, GiftUpdate(thank_you_message="또 고마워"))
    assert store.get_by_id(gift.id).thank_you_message == "고마워"


def test_blank_thank_you_is_rejected(service, store):
    gift = _create(service)
    _pay(store, gift)
    service.redeem(gift.code)
    with pytest.raises(ValidationFailed):
        service.update_gift(gift.id, GiftUpdate(thank_you_message="   "))
    assert store.get_by_id(gift.id).thank_you_message == ""


def test_update_requires_admin_for_status(service):
    gift = _create(service)
    with pytest.raises(Forbidden):
        service.update_gift(gift.id, GiftUpdate(status=GiftStatus.PAID))


def test_update_follows_transition_table(service, store, clock):
    gift = _create(service)
    with pytest.raises(StateConflict):
        service.update_gift(gift.id, GiftUpdate(status=GiftStatus.REFUNDED), is_admin=True)

    service.update_gift(gift.id, GiftUpdate(status=GiftStatus.PAID), is_admin=True)
    updated = service.update_gift(gift.id, GiftUpdate(status=GiftStatus.REGISTERED), is_admin=True)
    assert updated.status == GiftStatus.REGISTERED
    assert updated.registered_at == clock.now


def test_rejected_update_writes_nothing(service, store):
    gift = _create(service)
    # status change is valid, but the thank-you note is not allowed on a paid gift
    with pytest.raises(StateConflict):
        service.update_gift(
            gift.id, GiftUpdate(status=GiftStatus.PAID, thank_you_message="hi"), is_admin=True
        )
    assert store.get_by_id(gift.id).status == GiftStatus.PENDING


def test_registered_at_with_non_registered_status_writes_nothing(service, store):
    gift = _create(service)
    _pay(store, gift)
    with pytest.raises(StateConflict):
        service.update_gift(
            gift.id,
            GiftUpdate(status=GiftStatus.REFUNDED, registered_at=datetime(2026, 1, 2)),
            is_admin=True,
        )
    saved = store.get_by_id(gift.id)
    assert saved.status == GiftStatus.PAID
    assert saved.registered_at is None


def test_registered_at_is_kept_when_registering(service, store):
    gift = _create(service)
    _pay(store, gift)
    when = datetime(2026, 1, 2)
    updated = service.update_gift(
        gift.id, GiftUpdate(status=GiftStatus.REGISTERED, registered_at=when), is_admin=True
    )
    assert updated.status == GiftStatus.REGISTERED
    assert updated.registered_at == when


def test_to_read_reports_derived_expiry_without_writing(service, store, clock):
    gift = _create(service)
    _pay(store, gift)
    clock.advance(days=31)
    assert service.to_read(gift).status == GiftStatus.EXPIRED
    assert store.get_by_id(gift.id).status == GiftStatus.PAID


def test_stats_counts_derived_statuses(service, store, clock):
    _create(service)
    paid = _create(service)
    _pay(store, paid)
    stats = service.stats()
    assert stats[GiftStatus.PENDING] == 1
    assert stats[GiftStatus.PAID] == 1
    assert stats[GiftStatus.REGISTERED] == 0


def test_get_gift_by_id_or_code(service):
    gift = _create(service)
    assert service.get_gift(gift.id).id == gift.id
    assert service.get_gift(gift.code.lower()).id == gift.id
    with pytest.raises(NotFound):
        service.get_gift("missing")


def test_list_helpers_scope_by_identity(service, store):
    _create(service, sender_phone="010-1", receiver_email="b@example.com")
    _create(service, sender_phone="010-2", sender_email="x@example.com")

    assert len(service.list_gifts(phone="010-1")) == 1
    assert len(service.list_gifts(email="x@example.com")) == 1
    assert service.list_gifts() == []
    assert len(service.list_gifts(admin=True)) == 2
    assert len(service.list_received(email="b@example.com")) == 1
    assert isinstance(store.list()[0], Gift)
