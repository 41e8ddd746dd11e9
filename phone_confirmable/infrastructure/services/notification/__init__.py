from .queued_phone_notifier import QueuedPhoneNotifier, SmsMessage
from .sms_transport import HttpSmsTransport, LoggingSmsTransport

__all__ = ["QueuedPhoneNotifier", "SmsMessage", "HttpSmsTransport", "LoggingSmsTransport"]
