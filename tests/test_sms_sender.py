from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoRegionError

from triage.sms import sender
from triage.sms.sender import MAX_RETRIES, SmsSendError, send_sms


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "Publish")


@pytest.fixture
def sns():
    client = MagicMock()
    with patch.object(sender, "_get_client", return_value=client), patch.object(sender.time, "sleep"):
        yield client


def test_publish_transactional_sms(sns):
    sns.publish.return_value = {"MessageId": "abc-123"}
    result = send_sms("+1234567890", "MEDICAL ALERT: fever. Please seek medical attention immediately.")
    assert result.message_id == "abc-123"
    kwargs = sns.publish.call_args.kwargs
    assert kwargs["PhoneNumber"] == "+1234567890"
    assert kwargs["MessageAttributes"]["AWS.SNS.SMS.SMSType"]["StringValue"] == "Transactional"


def test_permanent_error_is_not_retried(sns):
    sns.publish.side_effect = _client_error("OptedOut")
    with pytest.raises(SmsSendError) as exc:
        send_sms("+1234567890", "hello")
    assert exc.value.code == "OptedOut"
    assert sns.publish.call_count == 1


def test_transient_error_is_retried(sns):
    sns.publish.side_effect = [_client_error("Throttling"), {"MessageId": "m-2"}]
    assert send_sms("+1234567890", "hello").message_id == "m-2"
    assert sns.publish.call_count == 2


def test_gives_up_after_max_retries(sns):
    sns.publish.side_effect = EndpointConnectionError(endpoint_url="https://sns.us-east-1.amazonaws.com")
    with pytest.raises(SmsSendError) as exc:
        send_sms("+1234567890", "hello")
    assert exc.value.code == "SMS_SEND_FAILED"
    assert sns.publish.call_count == MAX_RETRIES + 1


def test_client_construction_failure_raises_send_error():
    with patch.object(sender, "_client", None), patch.object(
        sender.boto3, "client", side_effect=NoRegionError()
    ):
        with pytest.raises(SmsSendError) as exc:
            send_sms("+1234567890", "hello")
    assert exc.value.code == "SMS_SEND_FAILED"
