from triage.sms.sender import SmsResult, SmsSendError, is_sms_configured, send_sms

__all__ = ["send_sms", "is_sms_configured", "SmsResult", "SmsSendError"]
