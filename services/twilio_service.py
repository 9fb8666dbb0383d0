from twilio.rest import Client
from twilio.base.exceptions import TwilioException
from typing import Optional
import logging
import re

logger = logging.getLogger(__name__)


class MessagingError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TwilioService:
    def __init__(self, account_sid: str, auth_token: str, whatsapp_number: str, client: Optional[Client] = None):
        if not all([account_sid, auth_token, whatsapp_number]):
            raise ValueError("Missing Twilio credentials")

        self.account_sid = account_sid
        self.whatsapp_number = whatsapp_number
        self.client = client or Client(account_sid, auth_token)

    def _format_phone_number(self, phone_number: str) -> str:
        """Normalize to E.164 and add the WhatsApp prefix when sending over WhatsApp."""
        if phone_number.startswith('whatsapp:'):
            return phone_number

        digits = re.sub(r'\D', '', phone_number)
        number = f'+{digits}'

        if self.whatsapp_number.startswith('whatsapp:'):
            number = f'whatsapp:{number}'

        return number

    def send_message(self, to_number: str, body: str) -> str:
        """Send one message and return the provider's message sid."""
        formatted_number = self._format_phone_number(to_number)
        try:
            message = self.client.messages.create(
                body=body,
                from_=self.whatsapp_number,
                to=formatted_number
            )
        except TwilioException as e:
            logger.error(f"Twilio send to {formatted_number} failed: {e}")
            raise MessagingError(str(e)) from e
        except Exception as e:
            # Transport failures from the underlying HTTP client
            logger.error(f"Twilio send to {formatted_number} failed: {e}")
            raise MessagingError(str(e) or e.__class__.__name__) from e

        logger.info(f"Sent message {message.sid} to {formatted_number}")
        return message.sid
