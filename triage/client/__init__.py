from triage.client.analysis_client import AnalysisClient
from triage.client.collector import SymptomCollector
from triage.client.errors import (
    AnalysisError,
    AnalysisHTTPError,
    AnalysisResponseFormatError,
    AnalysisTimeoutError,
    AnalysisTransportError,
)
from triage.client.escalation import EmergencyEscalation, EscalationView, build_alert_message
from triage.client.notifications import LoggingNotifier, Notifier, RecordingNotifier
from triage.client.risk import is_notable_risk, should_auto_open
from triage.client.session import SymptomCheckerSession

__all__ = [
    "AnalysisClient",
    "SymptomCollector",
    "AnalysisError",
    "AnalysisHTTPError",
    "AnalysisResponseFormatError",
    "AnalysisTimeoutError",
    "AnalysisTransportError",
    "EmergencyEscalation",
    "EscalationView",
    "build_alert_message",
    "LoggingNotifier",
    "Notifier",
    "RecordingNotifier",
    "is_notable_risk",
    "should_auto_open",
    "SymptomCheckerSession",
]
