"""Routes for the server-rendered booking experience."""
from __future__ import annotations

from datetime import date
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable

from flask import (
    Blueprint,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask.typing import ResponseReturnValue

from storefront.app.accounts import current_patient_name
from storefront.app.middleware import record_audit_entity
from storefront.app.services.booking_service import (
    clear_booking,
    discard_wizard,
    load_wizard,
    open_wizard,
    prepare_lmn,
    record_payment,
    save_wizard,
    submit_booking,
)
from storefront.app.services.maps import maps_enabled
from storefront.app.services.payments import (
    PaymentGatewayError,
    current_gateway,
    settle_card_payment,
)
from storefront.app.services.session_store import (
    booking_slot,
    current_storage,
    payment_slot,
)
from wellness.models.booking import (
    CARD,
    HSA,
    HSA_SIMULATED_INTENT_ID,
    AlreadyPaidError,
    parse_appointment_date,
)
from wellness.models.catalog import (
    ALL_CATEGORIES,
    APPOINTMENT_TIMES,
    categories,
    filter_services,
    get_service,
)
from wellness.models.conditions import (
    ATTESTATION_STATEMENT,
    HSA_PROVIDER_OPTIONS,
    US_STATES,
    ServiceCategory,
    conditions_for,
    risk_factor_prompt,
)
from wellness.models.hsa import (
    CHECKOUT_HSA_PROVIDERS,
    HSA_PROVIDERS,
    find_provider,
    submission_message,
)
from wellness.models.lmn import random_code
from wellness.models.questionnaire import (
    CONDITION_FIELDS,
    MAX_ANSWER_LENGTH,
    AnswerTooLongError,
    Back,
    Cancel,
    Cancelled,
    Completed,
    Edit,
    InvalidTransitionError,
    Next,
    Toggle,
    WizardStep,
    transition,
)

frontend_bp = Blueprint("frontend", __name__)

_TEXT_INPUTS = (
    "age",
    "hsa_provider",
    "state_of_residence",
    "other_diagnosed_conditions",
    "risk_factors",
    "other_conditions_preventing",
)


def requires_booking(view: Callable[..., ResponseReturnValue]) -> Callable[..., ResponseReturnValue]:
    """Redirect to the catalog unless the session holds a booking record."""

    @wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> ResponseReturnValue:
        booking = booking_slot(current_storage()).get()
        if booking is None:
            return redirect(url_for("frontend.marketplace"))
        return view(booking, *args, **kwargs)

    return wrapper


def requires_unpaid_booking(
    view: Callable[..., ResponseReturnValue],
) -> Callable[..., ResponseReturnValue]:
    """Like ``requires_booking``, but send paid bookings to the confirmation page."""

    @requires_booking
    @wraps(view)
    def wrapper(booking, *args: Any, **kwargs: Any) -> ResponseReturnValue:
        if booking.is_paid:
            return redirect(url_for("frontend.booking_confirmation"))
        return view(booking, *args, **kwargs)

    return wrapper


@frontend_bp.get("/")
def index() -> ResponseReturnValue:
    return redirect(url_for("frontend.marketplace"))


@frontend_bp.get("/marketplace")
def marketplace() -> str:
    """Render the catalog, filtered by category and search text."""

    category = request.args.get("category") or ALL_CATEGORIES
    search_text = (request.args.get("q") or "").strip()
    services = filter_services(category, search_text)

    selected_id = request.args.get("selected")
    selected = get_service(selected_id, services) if selected_id else None

    return render_template(
        "marketplace.html",
        services=services,
        categories=categories(),
        selected_category=category,
        search_text=search_text,
        selected_service=selected,
        maps_enabled=maps_enabled(current_app.config.get("GOOGLE_MAPS_API_KEY")),
        maps_api_key=current_app.config.get("GOOGLE_MAPS_API_KEY"),
    )


@frontend_bp.get("/marketplace/service/<service_id>")
def service_detail(service_id: str) -> ResponseReturnValue:
    service = get_service(service_id)
    if service is None:
        return redirect(url_for("frontend.marketplace"))
    return render_template(
        "service_detail.html",
        service=service,
        times=APPOINTMENT_TIMES,
        earliest_date=date.today().isoformat(),
        selected_date="",
        selected_time="",
    )


@frontend_bp.post("/marketplace/service/<service_id>/book")
def book_service(service_id: str) -> ResponseReturnValue:
    """Validate the chosen slot and open the questionnaire."""

    service = get_service(service_id)
    if service is None:
        return redirect(url_for("frontend.marketplace"))

    appointment_date = (request.form.get("appointment_date") or "").strip()
    appointment_time = (request.form.get("appointment_time") or "").strip()
    if not appointment_date or appointment_time not in APPOINTMENT_TIMES:
        return _render_detail_error(
            service,
            appointment_date,
            appointment_time,
            "Please select a date and time for your appointment.",
        )
    try:
        parsed = parse_appointment_date(appointment_date, date.today())
    except ValueError as exc:
        return _render_detail_error(service, appointment_date, appointment_time, str(exc))

    open_wizard(current_storage(), service, parsed.isoformat(), appointment_time)
    return redirect(url_for("frontend.questionnaire", service_id=service.id))


def _render_detail_error(service, appointment_date: str, appointment_time: str, error: str):
    return (
        render_template(
            "service_detail.html",
            service=service,
            times=APPOINTMENT_TIMES,
            earliest_date=date.today().isoformat(),
            selected_date=appointment_date,
            selected_time=appointment_time,
            error=error,
        ),
        HTTPStatus.BAD_REQUEST,
    )


def _render_step(
    service, state: WizardStep, status: HTTPStatus = HTTPStatus.OK, error: str | None = None
):
    category = ServiceCategory.for_service_name(service.name)
    return (
        render_template(
            "questionnaire.html",
            service=service,
            step=state,
            draft=state.draft,
            conditions=conditions_for(category),
            risk_prompt=risk_factor_prompt(category),
            hsa_providers=HSA_PROVIDER_OPTIONS,
            states=US_STATES,
            attestation_statement=ATTESTATION_STATEMENT,
            max_answer_length=MAX_ANSWER_LENGTH,
            error=error,
        ),
        status,
    )


def _form_actions(state: WizardStep, offered: tuple[str, ...]) -> list[Any]:
    """Translate the submitted step form into wizard actions."""

    actions: list[Any] = []
    for field in state.owned_fields:
        if field in _TEXT_INPUTS and field in request.form:
            actions.append(Edit(field, request.form.get(field, "")))
        elif field == "attestation":
            actions.append(Edit(field, request.form.get("attestation") == "on"))

    toggled = request.form.get("toggle")
    if toggled:
        target = next(
            (field for field in state.owned_fields if field in CONDITION_FIELDS), None
        )
        if target is None or toggled not in offered:
            raise InvalidTransitionError(f"{toggled!r} is not offered on this step.")
        actions.append(Toggle(target, toggled))
        return actions

    command = request.form.get("action", "next")
    actions.append({"back": Back(), "cancel": Cancel()}.get(command, Next()))
    return actions


@frontend_bp.route("/marketplace/service/<service_id>/questionnaire", methods=["GET", "POST"])
def questionnaire(service_id: str) -> ResponseReturnValue:
    """Drive the eight-step health questionnaire one request at a time."""

    service = get_service(service_id)
    if service is None:
        return redirect(url_for("frontend.marketplace"))

    storage = current_storage()
    wizard = load_wizard(storage, service.id)
    if wizard is None:
        return redirect(url_for("frontend.service_detail", service_id=service.id))

    if request.method == "GET":
        return _render_step(service, wizard.state)

    offered = conditions_for(ServiceCategory.for_service_name(service.name))
    state: Any = wizard.state
    try:
        for action in _form_actions(wizard.state, offered):
            state = transition(state, action)
    except AnswerTooLongError as exc:
        current_app.logger.warning("Rejected questionnaire input for %s", exc.field_name)
        return _render_step(service, wizard.state, HTTPStatus.BAD_REQUEST, error=str(exc))
    except InvalidTransitionError as exc:
        current_app.logger.warning("Rejected questionnaire input: %s", exc)
        return _render_step(service, wizard.state, HTTPStatus.BAD_REQUEST)

    if isinstance(state, Cancelled):
        discard_wizard(storage)
        return redirect(url_for("frontend.service_detail", service_id=service.id))

    if isinstance(state, Completed):
        submit_booking(
            storage,
            service,
            wizard.appointment_date,
            wizard.appointment_time,
            state.response,
        )
        record_audit_entity(service.id)
        return redirect(url_for("frontend.checkout"))

    stalled = isinstance(state, WizardStep) and state.number == wizard.state.number
    wizard.state = state
    save_wizard(storage, wizard)
    if stalled and _requested_next():
        return _render_step(
            service, state, HTTPStatus.BAD_REQUEST, error="Please answer this question to continue."
        )
    return redirect(url_for("frontend.questionnaire", service_id=service.id))


def _requested_next() -> bool:
    return not request.form.get("toggle") and request.form.get("action", "next") == "next"


@frontend_bp.get("/checkout")
@requires_unpaid_booking
def checkout(booking) -> ResponseReturnValue:
    method = request.args.get("method", CARD)
    if method not in (CARD, HSA):
        method = CARD
    return render_template(
        "checkout.html",
        booking=booking,
        payment_method=method,
        hsa_providers=CHECKOUT_HSA_PROVIDERS,
        selected_provider="",
        publishable_key=current_app.config.get("STRIPE_PUBLISHABLE_KEY"),
        currency=current_app.config.get("PAYMENT_CURRENCY", "usd"),
    )


@frontend_bp.post("/checkout/hsa")
@requires_unpaid_booking
def checkout_hsa(booking) -> ResponseReturnValue:
    """Complete the simulated HSA/FSA payment path."""

    provider = (request.form.get("hsa_provider") or "").strip()
    if provider not in CHECKOUT_HSA_PROVIDERS:
        return (
            render_template(
                "checkout.html",
                booking=booking,
                payment_method=HSA,
                hsa_providers=CHECKOUT_HSA_PROVIDERS,
                selected_provider="",
                publishable_key=current_app.config.get("STRIPE_PUBLISHABLE_KEY"),
                currency=current_app.config.get("PAYMENT_CURRENCY", "usd"),
                error="Please select your HSA/FSA provider.",
            ),
            HTTPStatus.BAD_REQUEST,
        )

    return _finish_payment(booking, HSA_SIMULATED_INTENT_ID, HSA, provider)


@frontend_bp.post("/checkout/complete")
@requires_unpaid_booking
def checkout_complete(booking) -> ResponseReturnValue:
    """Settle a card payment the browser confirmed with the processor."""

    intent_id = (request.form.get("payment_intent_id") or "").strip()
    if not intent_id:
        flash("Payment failed: missing payment reference.", "error")
        return redirect(url_for("frontend.checkout"))

    try:
        result = settle_card_payment(
            current_gateway(),
            intent_id,
            expected_amount=booking.amount_cents,
            expected_currency=current_app.config.get("PAYMENT_CURRENCY", "usd"),
        )
    except PaymentGatewayError as exc:
        current_app.logger.error("Payment error: %s", exc)
        flash(f"Payment failed: {exc}", "error")
        return redirect(url_for("frontend.checkout"))

    if not result.succeeded:
        current_app.logger.error("Payment error: %s", result.message)
        flash(f"Payment failed: {result.message}", "error")
        return redirect(url_for("frontend.checkout"))

    return _finish_payment(booking, result.intent_id, CARD, None)


def _finish_payment(booking, intent_id: str, method: str, provider: str | None):
    try:
        record_payment(
            current_storage(),
            booking,
            payment_intent_id=intent_id,
            payment_method=method,
            hsa_provider=provider,
        )
    except AlreadyPaidError:
        current_app.logger.info("Booking already paid; skipping payment for %s", intent_id)
        return redirect(url_for("frontend.booking_confirmation"))

    record_audit_entity(intent_id)
    return redirect(url_for("frontend.booking_confirmation"))


@frontend_bp.get("/booking-confirmation")
@requires_booking
def booking_confirmation(booking) -> str:
    payment = payment_slot(current_storage()).get()
    return render_template(
        "confirmation.html",
        booking=booking,
        payment=payment,
        confirmation_number=random_code("SH"),
    )


@frontend_bp.post("/booking-confirmation/receipt")
@requires_booking
def download_receipt(booking) -> ResponseReturnValue:
    flash("Receipt download functionality would be implemented here", "info")
    return redirect(url_for("frontend.booking_confirmation"))


@frontend_bp.post("/booking-confirmation/done")
def back_to_marketplace() -> ResponseReturnValue:
    """Clear the session's booking and return to the catalog."""

    clear_booking(current_storage())
    return redirect(url_for("frontend.marketplace"))


def _render_certification(booking, **context: Any):
    return render_template(
        "certification.html",
        booking=booking,
        providers=HSA_PROVIDERS,
        selected_provider=context.pop("selected_provider", ""),
        lmn=context.pop("lmn", None),
        **context,
    )


@frontend_bp.route("/certification", methods=["GET", "POST"])
@requires_booking
def certification(booking) -> ResponseReturnValue:
    """Select an HSA provider and generate the Letter of Medical Necessity."""

    if request.method == "GET":
        return _render_certification(booking)

    provider_code = request.form.get("provider") or ""
    provider = find_provider(provider_code)
    if provider is None:
        return (
            _render_certification(booking, error="Please select your HSA provider"),
            HTTPStatus.BAD_REQUEST,
        )

    lmn = prepare_lmn(
        booking,
        provider_code=provider.code,
        patient_name=current_patient_name(),
        delay_seconds=current_app.config.get("LMN_GENERATION_DELAY_SECONDS", 0),
    )

    record_audit_entity(lmn.lmn_id)
    return _render_certification(
        booking, selected_provider=provider.code, provider=provider, lmn=lmn
    )


@frontend_bp.post("/certification/download")
@requires_booking
def download_lmn(booking) -> ResponseReturnValue:
    flash("LMN PDF download functionality would be implemented here", "info")
    return redirect(url_for("frontend.certification"))


@frontend_bp.post("/certification/submit")
@requires_booking
def submit_lmn(booking) -> ResponseReturnValue:
    provider = find_provider(request.form.get("provider"))
    if provider is None:
        flash("Please select your HSA provider", "error")
    else:
        flash(submission_message(provider), "info")
    return redirect(url_for("frontend.certification"))
