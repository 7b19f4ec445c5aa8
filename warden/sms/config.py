import json
import logging
import os.path
from typing import Any, Optional

from pydantic.v1 import BaseSettings, Extra

from .enums import SMSProvider

logger = logging.getLogger(__name__)


class Config(BaseSettings):
    CONFIG_FILEPATH: str
    SMS_PROVIDER: SMSProvider

    events: Any = None
    provider_config: Any = None

    class Config:
        extra = Extra.ignore

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.read_config()

    def read_config(self):
        if not os.path.isfile(self.CONFIG_FILEPATH):
            raise OSError(f'Config.json file not found on specified path. {self.CONFIG_FILEPATH}')

        with open(self.CONFIG_FILEPATH, encoding='UTF-8') as config:
            config = json.load(config)
            self.events = config.get('events') or {}

            for configuration in config['configurations']:
                if configuration['provider'] == self.SMS_PROVIDER:
                    self.provider_config = configuration
                    logger.debug("Loaded %s SMS configuration", self.SMS_PROVIDER)
                    if self.SMS_PROVIDER == SMSProvider.TWILIO:
                        # Ensure either 'senderPhoneNumber' or 'messagingServiceSid' is present
                        if not (self.provider_config.get('senderPhoneNumber') or self.provider_config.get('messagingServiceSid')):
                            raise ValueError('Missing required fields for Twilio configuration. At least one of "senderPhoneNumber" or "messagingServiceSid" must be provided.')

        if self.provider_config is None:
            raise ValueError(f'No configuration found for SMS provider {self.SMS_PROVIDER}.')

    def get_event(self, event_name: str) -> dict:
        event = self.events.get(event_name)
        if event is None:
            raise ValueError(f"Unknown SMS event: {event_name}")
        return event

    @property
    def SENDER_PHONE_NUMBER(self) -> Optional[str]:
        return self.provider_config.get("senderPhoneNumber")

    @property
    def WHATSAPP_SENDER_NUMBER(self) -> Optional[str]:
        return self.provider_config.get("whatsappSenderNumber") or self.SENDER_PHONE_NUMBER

    @property
    def MESSAGING_SERVICE_SID(self) -> Optional[str]:
        return self.provider_config.get('messagingServiceSid')


class TwilioConfig(Config):
    TWILIO_ACCOUNT_SID: str
    TWILIO_AUTH_TOKEN: str


config_classes = [
    TwilioConfig
]


class SMSConfig(*config_classes):
    pass
