import logging
import re

from warden.exceptions import InvalidIdentity
from warden.models.enums import Channel
from warden.sms.base import SMSService

from .base import ChannelAdapter, OtpMessage

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r'^\+[1-9]\d{7,14}$')
PHONE_SEPARATORS = re.compile(r'[\s\-().]')


class PhoneChannel(ChannelAdapter):
    """A channel addressed by an E.164 phone number."""

    default_event_name = 'two_factor_code'

    def __init__(self, sms_service: SMSService, event_name: str = None):
        self.sms_service = sms_service
        self.event_name = event_name or self.default_event_name

    def normalize_identity(self, identity: str) -> str:
        if not isinstance(identity, str):
            raise InvalidIdentity(self.channel, str(identity))
        phone_number = PHONE_SEPARATORS.sub('', identity.strip())
        if phone_number.startswith('00'):
            phone_number = '+' + phone_number[2:]
        if not E164_PATTERN.match(phone_number):
            raise InvalidIdentity(self.channel, identity)
        return phone_number

    def mask_identity(self, identity: str) -> str:
        digits = re.sub(r'\D', '', identity)
        if len(digits) < 4:
            return identity
        return '*' * (len(digits) - 4) + digits[-4:]

    def send(self, identity: str, message: OtpMessage) -> bool:
        try:
            self.sms_service.send_sms(self.event_name, identity, message.parameters())
        except Exception:
            logger.exception("Failed to send %s code to %s", self.channel, self.mask_identity(identity))
            return False
        return True


class SmsChannel(PhoneChannel):
    channel = Channel.SMS
    default_event_name = 'two_factor_sms_code'


class WhatsAppChannel(PhoneChannel):
    channel = Channel.WHATSAPP
    default_event_name = 'two_factor_whatsapp_code'
