"""
Wire models shared by the symptom checker client and the analysis/notification service.
JSON keys are camelCase on the wire; Python attributes are snake_case.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["mild", "moderate", "severe"]
RiskLevel = Literal["low", "medium", "high", "critical"]
Urgency = Literal["routine", "urgent", "emergency"]
MessageType = Literal["general", "alert", "info"]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class SymptomEntry(_WireModel):
    """One symptom as entered by the patient."""

    name: str = Field(..., min_length=1)
    severity: Severity = "mild"
    duration: str = Field(..., min_length=1)
    description: str = ""


class PossibleCondition(_WireModel):
    condition: str
    probability: int = Field(..., ge=0, le=100)
    description: str = ""


class Telemetry(_WireModel):
    """Advisory analysis metadata. Never changes the workflow outcome."""

    response_time: float | None = Field(default=None, alias="responseTime")
    model_used: str | None = Field(default=None, alias="modelUsed")
    tokens_used: int | None = Field(default=None, alias="tokensUsed")
    fallback_used: bool | None = Field(default=None, alias="fallbackUsed")
    error: str | None = None
    cached: bool | None = None


class AnalysisResult(_WireModel):
    """Risk analysis returned by the analysis endpoint."""

    risk_level: RiskLevel = Field(..., alias="riskLevel")
    urgency: Urgency = "routine"
    recommendations: list[str] = Field(default_factory=list)
    possible_conditions: list[PossibleCondition] = Field(default_factory=list, alias="possibleConditions")
    follow_up_in: str | None = Field(default=None, alias="followUpIn")
    telemetry: Telemetry | None = None


class EmergencyContactRequest(_WireModel):
    """Body posted to the notification endpoint. Built fresh for every submission."""

    message_type: Literal["alert"] = Field(default="alert", alias="messageType")
    phone_number: str = Field(..., alias="phoneNumber")
    recipient_name: str = Field(..., alias="recipientName")
    content: str
