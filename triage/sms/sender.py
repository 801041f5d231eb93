"""
SMS delivery through AWS SNS. Used by POST /api/sms for emergency-contact alerts.
SMS_ENABLED=1 turns sending on; region and credentials come from the usual AWS environment.
"""

import os
import time
from typing import NamedTuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

SMS_ENABLED = os.getenv("SMS_ENABLED", "0").strip().lower() in ("1", "true", "yes")
SMS_SENDER_ID = os.getenv("SMS_SENDER_ID", "").strip()
DEFAULT_TIMEOUT_SEC = 10
MAX_RETRIES = 2
INITIAL_BACKOFF_SEC = 0.5

# SNS error codes that retrying will not fix
_PERMANENT_ERRORS = {"InvalidParameter", "InvalidParameterValue", "OptedOut", "AuthorizationError"}

_client = None


class SmsResult(NamedTuple):
    message_id: str


class SmsSendError(Exception):
    """Delivery failed. code is the SNS error code when there is one."""

    def __init__(self, message: str, code: str = "SMS_SEND_FAILED"):
        super().__init__(message)
        self.code = code


def is_sms_configured() -> bool:
    return SMS_ENABLED


def _get_client():
    global _client
    if _client is None:
        _client = boto3.client(
            "sns",
            config=Config(
                connect_timeout=5,
                read_timeout=DEFAULT_TIMEOUT_SEC,
                retries={"mode": "standard", "max_attempts": 0},
            ),
        )
    return _client


def _message_attributes() -> dict:
    attributes = {"AWS.SNS.SMS.SMSType": {"DataType": "String", "StringValue": "Transactional"}}
    if SMS_SENDER_ID:
        attributes["AWS.SNS.SMS.SenderID"] = {"DataType": "String", "StringValue": SMS_SENDER_ID}
    return attributes


def send_sms(phone_number: str, body: str) -> SmsResult:
    """
    Publish one SMS to an E.164 phone number. Transient failures are retried with backoff;
    invalid numbers and opted-out recipients fail immediately.
    """
    try:
        client = _get_client()
    except BotoCoreError as e:
        # e.g. NoRegionError when SMS_ENABLED=1 but no AWS region is set
        raise SmsSendError(f"SNS client unavailable: {e}") from e
    for attempt in range(MAX_RETRIES + 1):
        try:
            response = client.publish(
                PhoneNumber=phone_number,
                Message=body,
                MessageAttributes=_message_attributes(),
            )
            return SmsResult(message_id=response.get("MessageId", ""))
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "SMS_SEND_FAILED")
            if code in _PERMANENT_ERRORS or attempt == MAX_RETRIES:
                raise SmsSendError(str(e), code=code) from e
        except (BotoCoreError, OSError) as e:
            # OSError includes read timeout and connection errors
            if attempt == MAX_RETRIES:
                raise SmsSendError(str(e)) from e
        time.sleep(INITIAL_BACKOFF_SEC * (2**attempt))
    raise SmsSendError("SMS was not sent")
