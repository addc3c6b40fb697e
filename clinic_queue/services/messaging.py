import logging

from requests import RequestException
from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from clinic_queue.core import config
from clinic_queue.core.config import MessagingBackend
from clinic_queue.core.exceptions import DispatchError

logger = logging.getLogger(__name__)


class SimulatedDispatcher:
    """Logs the message instead of sending it."""

    def __init__(self):
        self.sent = []

    def send(self, phone: str, message: str) -> None:
        if not phone:
            raise DispatchError("Missing phone number")
        logger.info("Simulated SMS to %s: %s", phone, message)
        self.sent.append((phone, message))


class TwilioDispatcher:
    def __init__(self, account_sid: str, auth_token: str, from_number: str):
        if not (account_sid and auth_token and from_number):
            raise DispatchError("Twilio credentials are not configured")
        self.client = Client(account_sid, auth_token)
        self.from_number = from_number

    def send(self, phone: str, message: str) -> None:
        try:
            sms = self.client.messages.create(to=phone, from_=self.from_number, body=message)
        except (TwilioException, RequestException) as e:
            raise DispatchError(f"SMS to {phone} failed: {e}") from e
        logger.info("SMS %s queued for %s", sms.sid, phone)


def get_dispatcher():
    if config.MESSAGING_BACKEND == MessagingBackend.TWILIO:
        return TwilioDispatcher(
            config.TWILIO_ACCOUNT_SID,
            config.TWILIO_AUTH_TOKEN,
            config.TWILIO_FROM_NUMBER,
        )
    return SimulatedDispatcher()
