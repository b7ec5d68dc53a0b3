from decimal import Decimal

import pytest

from booking_engine.availability.cache import AvailabilityCache
from booking_engine.bookings.models import SubmissionStatus
from booking_engine.bookings.service import BookingSubmitter
from booking_engine.errors import TransportError, WizardError
from booking_engine.infra.api_client import ApiEnvelope
from booking_engine.payments.intent_manager import PaymentIntentManager
from booking_engine.payments.models import PaymentAuthorization, PaymentConfirmation, PaymentState
from booking_engine.pricing.models import DEFAULT_PRICING, PriceTable
from booking_engine.settings.models import SessionConfig
from booking_engine.wizard.controller import WizardController
from booking_engine.wizard.models import WizardStep

DATE = "2026-06-01"

class _Creator:
    def __init__(self):
        self.calls = []

    def __call__(self, *, amount, currency, metadata):
        self.calls.append(amount)
        n = len(self.calls)
        return PaymentAuthorization(f"secret_{n}", f"pi_{n}", amount)

class _Fetcher:
    def __init__(self, slots=None, error=None):
        self.slots = slots or {"10:00": 20}
        self.error = error
        self.calls = []

    def __call__(self, date):
        self.calls.append(date)
        if self.error:
            raise self.error
        return dict(self.slots)

def _confirmed_poster(calls=None):
    def poster(payload, *, idempotency_key):
        if calls is not None:
            calls.append(idempotency_key)
        return ApiEnvelope(True, data={"success": True, "booking": {"id": "bk_1", "emailSent": True}})
    return poster

def _controller(config=None, fetcher=None, poster=None):
    config = config or SessionConfig(price_table=DEFAULT_PRICING, purchases_enabled=True, attractions_enabled=True)
    creator = _Creator()
    fetcher = fetcher or _Fetcher()
    controller = WizardController(
        config,
        availability=AvailabilityCache(fetcher=fetcher),
        payments=PaymentIntentManager(creator=creator),
        submitter=BookingSubmitter(poster=poster or _confirmed_poster(), sleep=lambda s: None),
    )
    return controller, creator, fetcher

def _walk_to_payment(controller):
    controller.update_selection(date=DATE, time_slot="10:00")
    assert controller.next()
    controller.update_selection(pickup_location="pena-palace", adult_count=2, child_count=1)
    assert controller.next()
    controller.toggle_attraction("pena-palace-full")
    assert controller.next()
    controller.update_selection(full_name="Ana Silva", email="ana@example.com", confirm_email="ana@example.com", phone_number="912345678")
    assert controller.next()
    assert controller.step is WizardStep.PAYMENT

def test_forward_navigation_requires_valid_step():
    controller, _, _ = _controller()

    assert controller.next() is False
    assert controller.step is WizardStep.DATE_TIME
    assert "Date requise" in controller.step_errors

    controller.update_selection(date=DATE, time_slot="10:00")
    assert controller.next() is True
    assert controller.step is WizardStep.PICKUP_AND_COUNT
    assert controller.step_errors == []

    controller.update_selection(adult_count=0)
    assert controller.next() is False
    assert controller.step is WizardStep.PICKUP_AND_COUNT

def test_purchases_disabled_blocks_step_one():
    config = SessionConfig(purchases_enabled=False)
    controller, _, _ = _controller(config=config)
    controller.update_selection(date=DATE, time_slot="10:00")
    assert controller.next() is False
    assert controller.step_errors == ["La vente de billets est momentanément suspendue"]

def test_back_navigation_always_allowed_after_step_one():
    controller, _, _ = _controller()
    assert controller.back() is False

    controller.update_selection(date=DATE, time_slot="11:00")
    controller.next()
    assert controller.back() is True
    assert controller.step is WizardStep.DATE_TIME

def test_every_step_entry_scrolls_to_top():
    controller, _, _ = _controller()
    events = []
    controller.subscribe(lambda event, data: events.append((event, data)))

    _walk_to_payment(controller)
    controller.back()

    scrolls = [data["step"] for event, data in events if event == "scroll_to_top"]
    assert scrolls == [2, 3, 4, 5, 4]

def test_unsubscribe_and_failing_observer():
    controller, _, _ = _controller()
    events = []

    def broken(event, data):
        raise RuntimeError("observer down")

    controller.subscribe(broken)
    unsubscribe = controller.subscribe(lambda event, data: events.append(event))
    controller.update_selection(date=DATE)
    unsubscribe()
    controller.update_selection(time_slot="10:00")

    assert events == ["selection_changed"]

def test_date_selection_fetches_availability_once():
    controller, _, fetcher = _controller()
    controller.update_selection(date=DATE)
    controller.update_selection(time_slot="10:00")
    controller.select_date(DATE)
    assert fetcher.calls == [DATE]

def test_failed_date_selection_fetches_once():
    controller, _, fetcher = _controller(fetcher=_Fetcher(error=TransportError("Erreur réseau")))

    assert controller.select_date(DATE) == {}
    assert fetcher.calls == [DATE]

def test_failed_availability_keeps_step_one_navigable():
    controller, _, _ = _controller(fetcher=_Fetcher(error=TransportError("Erreur réseau")))
    controller.update_selection(date=DATE, time_slot="10:00")

    assert controller.availability.get(DATE, "10:00") == 50
    assert controller.next() is True

def test_sold_out_slot_blocks_step_one():
    controller, _, _ = _controller(fetcher=_Fetcher(slots={"10:00": 0}))
    controller.update_selection(date=DATE, time_slot="10:00")
    assert controller.next() is False
    assert controller.step_errors == ["Créneau complet"]

def test_payment_step_creates_authorization_for_current_total():
    controller, creator, _ = _controller()
    _walk_to_payment(controller)

    assert creator.calls == [Decimal("122.00")]
    assert controller.payments.state is PaymentState.READY
    assert controller.breakdown().grand_total == Decimal("122")

def test_back_keeps_authorization_and_reuses_it():
    controller, creator, _ = _controller()
    _walk_to_payment(controller)
    first = controller.payments.authorization

    controller.back()
    assert controller.payments.authorization is first
    controller.next()

    assert len(creator.calls) == 1
    assert controller.payments.authorization is first

def test_changed_total_recreates_authorization():
    controller, creator, _ = _controller()
    _walk_to_payment(controller)

    controller.back()
    controller.update_selection(adult_count=3)
    controller.next()

    assert creator.calls == [Decimal("122.00"), Decimal("166.00")]
    assert controller.payments.authorization.provider_intent_id == "pi_2"

def test_selection_locked_on_payment_step():
    controller, _, _ = _controller()
    _walk_to_payment(controller)
    with pytest.raises(WizardError) as exc:
        controller.update_selection(adult_count=5)
    assert exc.value.code == "selection_locked"

def test_invalid_selection_values_are_refused():
    controller, _, _ = _controller()
    with pytest.raises(WizardError) as exc:
        controller.update_selection(adult_count=-1)
    assert exc.value.code == "invalid_selection"
    with pytest.raises(WizardError):
        controller.update_selection(favourite_colour="blue")

def test_attractions_disabled_refuses_toggle_but_step_passes():
    config = SessionConfig(purchases_enabled=True, attractions_enabled=False)
    controller, _, _ = _controller(config=config)
    controller.update_selection(date=DATE, time_slot="11:00")
    controller.next()
    controller.update_selection(pickup_location="pena-palace")
    controller.next()

    with pytest.raises(WizardError) as exc:
        controller.toggle_attraction("pena-palace-full")
    assert exc.value.code == "attractions_disabled"
    assert controller.next() is True

def test_successful_payment_submits_booking_and_closes_checkout():
    keys = []
    controller, _, _ = _controller(poster=_confirmed_poster(keys))
    events = []
    controller.subscribe(lambda event, data: events.append(event))
    _walk_to_payment(controller)

    outcome = controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")

    assert outcome.status is SubmissionStatus.CONFIRMED
    assert keys == ["booking-pi_1"]
    assert "booking_confirmed" in events
    assert controller.is_closed is True
    assert controller.back() is False
    with pytest.raises(WizardError) as exc:
        controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")
    assert exc.value.code == "checkout_closed"

def test_navigation_and_second_submit_locked_while_submitting():
    seen = {}
    controller = None

    def poster(payload, *, idempotency_key):
        seen["submitting"] = controller.submitting
        seen["back"] = controller.back()
        with pytest.raises(WizardError) as exc:
            controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")
        seen["code"] = exc.value.code
        return ApiEnvelope(True, data={"success": True, "booking": {"id": "bk_1"}})

    controller, _, _ = _controller(poster=poster)
    _walk_to_payment(controller)
    controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")

    assert seen == {"submitting": True, "back": False, "code": "submission_in_progress"}
    assert controller.submitting is False

def test_failed_payment_stays_on_payment_step():
    calls = []
    controller, _, _ = _controller(poster=_confirmed_poster(calls))
    _walk_to_payment(controller)

    assert controller.handle_payment_result(PaymentConfirmation.FAILED, "pi_1", error="Carte refusée") is None

    assert calls == []
    assert controller.step is WizardStep.PAYMENT
    assert controller.payment_notice == "Carte refusée"

def test_requires_action_sets_pending_notice():
    controller, _, _ = _controller()
    _walk_to_payment(controller)
    assert controller.handle_payment_result(PaymentConfirmation.REQUIRES_ACTION, "pi_1") is None
    assert "action supplémentaire" in controller.payment_notice

def test_payment_result_for_another_intent_is_refused():
    controller, _, _ = _controller()
    _walk_to_payment(controller)
    with pytest.raises(WizardError) as exc:
        controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_other")
    assert exc.value.code == "intent_mismatch"

def test_payment_result_outside_payment_step_is_refused():
    controller, _, _ = _controller()
    with pytest.raises(WizardError) as exc:
        controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")
    assert exc.value.code == "wrong_step"

def test_seat_rejection_refreshes_availability():
    error = "Not enough seats available. Only 1 seats left"

    def poster(payload, *, idempotency_key):
        return ApiEnvelope(False, data={"success": False, "error": error}, error=error, status_code=400)

    controller, _, fetcher = _controller(poster=poster)
    events = []
    controller.subscribe(lambda event, data: events.append(event))
    _walk_to_payment(controller)
    fetcher.slots = {"10:00": 1}

    outcome = controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")

    assert outcome.status is SubmissionStatus.REJECTED
    assert fetcher.calls == [DATE, DATE]
    assert controller.availability.get(DATE, "10:00") == 1
    assert "availability_refreshed" in events
    assert "booking_rejected" in events
    assert controller.payments.state is PaymentState.UNINITIALIZED
    assert controller.is_closed is False
    assert controller.back() is True

def test_ambiguous_outcome_blocks_resubmission():
    def poster(payload, *, idempotency_key):
        return ApiEnvelope(True, data={"success": True, "booking": {}})

    controller, _, _ = _controller(poster=poster)
    _walk_to_payment(controller)

    outcome = controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")

    assert outcome.status is SubmissionStatus.AMBIGUOUS
    assert outcome.payment_reference == "pi_1"
    assert controller.is_closed is True
    with pytest.raises(WizardError):
        controller.handle_payment_result(PaymentConfirmation.SUCCEEDED, "pi_1")

def test_content_update_reprices_and_rederives_authorization():
    controller, creator, _ = _controller()
    events = []
    controller.subscribe(lambda event, data: events.append((event, data)))
    _walk_to_payment(controller)

    controller.notify_content_updated(PriceTable.from_payload({"basePriceAdult": 30}))

    # 2 x 30 + 18 + 15 + 42
    assert creator.calls == [Decimal("122.00"), Decimal("135.00")]
    pricing_events = [data for event, data in events if event == "pricing_updated"]
    assert pricing_events[-1]["breakdown"]["grand_total"] == "135.00"

def test_content_update_does_not_leave_error_state():
    controller, _, _ = _controller()
    failures = []

    def failing_creator(*, amount, currency, metadata):
        failures.append(amount)
        raise TransportError("Erreur réseau")

    controller.payments = PaymentIntentManager(creator=failing_creator)
    events = []
    controller.subscribe(lambda event, data: events.append((event, data)))
    _walk_to_payment(controller)
    assert controller.payments.state is PaymentState.ERROR

    controller.notify_content_updated(DEFAULT_PRICING)

    assert len(failures) == 1
    assert controller.payments.state is PaymentState.ERROR
    assert events[-1][0] == "payment_state"
    assert events[-1][1]["state"] == "error"

    controller.retry_payment()
    assert len(failures) == 2

def test_retry_payment_only_on_payment_step():
    controller, creator, _ = _controller()
    with pytest.raises(WizardError):
        controller.retry_payment()
    _walk_to_payment(controller)
    controller.retry_payment()
    assert len(creator.calls) == 2

def test_to_dict_exposes_state():
    controller, _, _ = _controller()
    _walk_to_payment(controller)

    state = controller.to_dict()

    assert state["step"] == 5
    assert state["step_name"] == "payment"
    assert state["breakdown"]["display_total"] == "€122.00"
    assert state["breakdown"]["vehicles"] == 1
    assert state["payment"]["state"] == "ready"
    assert state["availability"]["10:00"] == {"seats": 20, "status": "available"}
    assert state["can_go_back"] is True
    assert state["outcome"] is None
