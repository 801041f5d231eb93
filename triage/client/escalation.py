"""
Emergency escalation flow: the emergency-contact control shown for notable-risk analyses.

States:
  hidden       - risk not notable, nothing rendered
  collapsed    - "notify" control visible, form hidden
  form_visible - contact name / phone form shown
  submitting   - notification request in flight
  success      - confirmation shown (form stays open until closed)
  error        - fixed failure message shown; the user may edit and resubmit

Transitions are pure functions over a frozen EscalationView. EmergencyEscalation wires them to
the notification request.
"""

import os
from collections.abc import Callable, Sequence
from typing import Literal

import httpx
from pydantic import BaseModel, ConfigDict

from triage.client.notifications import LoggingNotifier, Notifier
from triage.client.risk import is_notable_risk
from triage.logging_structured import log_client_event
from triage.schemas import AnalysisResult, EmergencyContactRequest

EscalationState = Literal["hidden", "collapsed", "form_visible", "submitting", "success", "error"]

FORM_STATES: frozenset[str] = frozenset({"form_visible", "submitting", "success", "error"})

NOTIFICATION_BASE_URL = (
    os.getenv("TRIAGE_NOTIFICATION_BASE_URL") or os.getenv("TRIAGE_API_BASE_URL") or "http://localhost:8000"
).rstrip("/")
NOTIFICATION_PATH = "/api/sms"

ALERT_PREFIX = "MEDICAL ALERT: "
ALERT_SUFFIX = ". Please seek medical attention immediately."

VALIDATION_ERROR = "Please provide both name and phone number for emergency contact"
SEND_FAILED_ERROR = "Failed to send emergency contact. Please try again or call emergency services directly."
SUCCESS_MESSAGE = "Emergency contact has been notified."
PHONE_HELP = "Must include country code (e.g., +1 for US)"


class EscalationView(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: EscalationState = "hidden"
    contact_name: str = ""
    contact_phone: str = ""
    error: str | None = None


def build_alert_message(symptom_names: Sequence[str]) -> str:
    return f"{ALERT_PREFIX}{', '.join(symptom_names)}{ALERT_SUFFIX}"


def build_contact_request(view: EscalationView, symptom_names: Sequence[str]) -> EmergencyContactRequest:
    return EmergencyContactRequest(
        phone_number=view.contact_phone,
        recipient_name=view.contact_name,
        content=build_alert_message(symptom_names),
    )


# --- Transitions ---


def force_open(view: EscalationView) -> EscalationView:
    """Auto-open: show the form whatever the user did before. A request in flight is left alone."""
    if view.state in ("hidden", "submitting"):
        return view
    return view.model_copy(update={"state": "form_visible", "error": None})


def sync(view: EscalationView, analysis: AnalysisResult | None, *, force: bool = False) -> EscalationView:
    """Align the view with the current analysis. force applies the auto-open rule."""
    if not is_notable_risk(analysis):
        return view.model_copy(update={"state": "hidden", "error": None})
    if view.state == "hidden":
        view = view.model_copy(update={"state": "collapsed"})
    if force:
        return force_open(view)
    return view


def open_form(view: EscalationView) -> EscalationView:
    if view.state != "collapsed":
        return view
    return view.model_copy(update={"state": "form_visible"})


def close(view: EscalationView) -> EscalationView:
    if view.state == "hidden":
        return view
    return view.model_copy(update={"state": "collapsed"})


def edit_contact(view: EscalationView, *, name: str | None = None, phone: str | None = None) -> EscalationView:
    if view.state not in FORM_STATES or view.state == "submitting":
        return view
    update: dict = {}
    if name is not None:
        update["contact_name"] = name
    if phone is not None:
        update["contact_phone"] = phone
    if view.state in ("success", "error"):
        update["state"] = "form_visible"
    return view.model_copy(update=update)


def begin_submit(view: EscalationView) -> EscalationView:
    """Validation gate. Missing name or phone keeps the form open with an inline error; no request is made."""
    if view.state not in ("form_visible", "success", "error"):
        return view
    if not view.contact_name.strip() or not view.contact_phone.strip():
        return view.model_copy(update={"state": "form_visible", "error": VALIDATION_ERROR})
    return view.model_copy(update={"state": "submitting", "error": None})


def submit_succeeded(view: EscalationView) -> EscalationView:
    return view.model_copy(update={"state": "success", "error": None})


def submit_failed(view: EscalationView) -> EscalationView:
    return view.model_copy(update={"state": "error", "error": SEND_FAILED_ERROR})


class EmergencyEscalation:
    """
    Emergency-contact component. Inputs from the outer page: the current analysis, the symptom
    names, and an optional forced show_form flag with an on_close callback.
    """

    def __init__(
        self,
        analysis: AnalysisResult | None = None,
        symptom_names: Sequence[str] = (),
        *,
        show_form: bool = False,
        on_close: Callable[[], None] | None = None,
        base_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
        notifier: Notifier | None = None,
    ):
        self.base_url = (base_url or NOTIFICATION_BASE_URL).rstrip("/")
        self.on_close = on_close
        self.notifier = notifier or LoggingNotifier()
        self._transport = transport
        self.analysis: AnalysisResult | None = None
        self.symptom_names: list[str] = []
        self.show_form = False
        self.view = EscalationView()
        self.update(analysis, symptom_names, show_form=show_form)

    @property
    def state(self) -> EscalationState:
        return self.view.state

    @property
    def is_visible(self) -> bool:
        return self.view.state != "hidden"

    @property
    def is_form_visible(self) -> bool:
        return self.view.state in FORM_STATES

    @property
    def is_submitting(self) -> bool:
        return self.view.state == "submitting"

    @property
    def error(self) -> str | None:
        return self.view.error

    @property
    def phone_help(self) -> str | None:
        """Guidance under the phone field; the number must carry its country code."""
        return PHONE_HELP if self.is_form_visible else None

    @property
    def success_message(self) -> str | None:
        return SUCCESS_MESSAGE if self.view.state == "success" else None

    def update(
        self,
        analysis: AnalysisResult | None,
        symptom_names: Sequence[str],
        *,
        show_form: bool = False,
    ) -> None:
        self.analysis = analysis
        self.symptom_names = list(symptom_names)
        self.show_form = show_form and is_notable_risk(analysis)
        self.view = sync(self.view, analysis, force=self.show_form)

    def open_form(self) -> None:
        self.view = open_form(self.view)

    def close(self) -> None:
        self.view = close(self.view)
        self.show_form = False
        if self.on_close is not None:
            self.on_close()

    def set_contact_name(self, name: str) -> None:
        self.view = edit_contact(self.view, name=name)

    def set_contact_phone(self, phone: str) -> None:
        self.view = edit_contact(self.view, phone=phone)

    def submit(self) -> bool:
        """Validate, then post the alert. Returns True when the notification endpoint accepted it."""
        self.view = begin_submit(self.view)
        if self.view.state != "submitting":
            return False

        request = build_contact_request(self.view, self.symptom_names)
        try:
            with httpx.Client(base_url=self.base_url, transport=self._transport) as client:
                response = client.post(
                    NOTIFICATION_PATH,
                    json=request.to_wire(),
                    headers={"Content-Type": "application/json"},
                )
            ok = response.is_success
            reason = "" if ok else f"HTTP {response.status_code}"
        except httpx.HTTPError as e:
            ok = False
            reason = f"{type(e).__name__}: {e}"

        if not ok:
            log_client_event("escalation_failed", phone_number=request.phone_number, reason=reason)
            self.view = submit_failed(self.view)
            return False

        log_client_event(
            "escalation_sent",
            phone_number=request.phone_number,
            symptom_count=len(self.symptom_names),
        )
        self.view = submit_succeeded(self.view)
        self.notifier.notify("Emergency contact notified", SUCCESS_MESSAGE, variant="success")
        return True
