import logging
from typing import Any

from twilio.rest import Client
from jinja2 import Template

from .base import SMSService
from .config import TwilioConfig
from .enums import MessageType


logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = 'whatsapp:'


def _whatsapp_address(number: str) -> str:
    return number if number.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{number}"


class TwilioService(SMSService):

    def __init__(self):
        pass

    def __call__(self, config: TwilioConfig, *args, **kwargs):
        super().__call__(config)

        self.client = Client(
            self.config.TWILIO_ACCOUNT_SID,
            self.config.TWILIO_AUTH_TOKEN
        )

        return self

    def render(self, event_name: str, parameters: dict) -> str:
        event_mapping = self.config.get_event(event_name)
        default_parameters = event_mapping.get('default_parameters', {})
        event_parameters = {**default_parameters, **parameters}
        return Template(event_mapping.get('template')).render(**event_parameters)

    def send_sms(self, event_name: str, phone_number: str, parameters: dict) -> Any:
        event_mapping = self.config.get_event(event_name)
        event_type = (event_mapping.get('type') or '').lower()
        message_body = self.render(event_name, parameters)

        params = {}
        if self.config.MESSAGING_SERVICE_SID:
            params['messaging_service_sid'] = self.config.MESSAGING_SERVICE_SID

        if event_type == MessageType.SMS:
            if self.config.SENDER_PHONE_NUMBER:
                params['from_'] = self.config.SENDER_PHONE_NUMBER
            to = phone_number
        elif event_type == MessageType.WHATSAPP:
            if self.config.WHATSAPP_SENDER_NUMBER:
                params['from_'] = _whatsapp_address(self.config.WHATSAPP_SENDER_NUMBER)
            to = _whatsapp_address(phone_number)
        else:
            raise ValueError(f"Unsupported event type: {event_type}")

        message = self.client.messages.create(
            body=message_body,
            to=to,
            **params
        )
        logger.info(f"{event_type.upper()} message queued. SID: {message.sid}")
        return message
