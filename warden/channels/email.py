import logging
import re

from warden.emailing.base import EmailService
from warden.exceptions import InvalidIdentity
from warden.models.enums import Channel

from .base import ChannelAdapter, OtpMessage

logger = logging.getLogger(__name__)

LOCAL_PART_PATTERN = re.compile(r"^[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+(\.[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+)*$")
DOMAIN_LABEL_PATTERN = re.compile(r'^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$')


class EmailChannel(ChannelAdapter):
    channel = Channel.EMAIL
    default_event_name = 'two_factor_email_code'

    def __init__(self, email_service: EmailService, event_name: str = None):
        self.email_service = email_service
        self.event_name = event_name or self.default_event_name

    def normalize_identity(self, identity: str) -> str:
        if not isinstance(identity, str):
            raise InvalidIdentity(self.channel, str(identity))
        address = identity.strip()
        if len(address) > 254 or address.count('@') != 1:
            raise InvalidIdentity(self.channel, identity)
        local, domain = address.split('@')
        labels = domain.split('.')
        if (
            not 0 < len(local) <= 64
            or not LOCAL_PART_PATTERN.match(local)
            or len(labels) < 2
            or not all(DOMAIN_LABEL_PATTERN.match(label) for label in labels)
            or labels[-1].isdigit()
        ):
            raise InvalidIdentity(self.channel, identity)
        return f"{local}@{domain.lower()}"

    def mask_identity(self, identity: str) -> str:
        local, _, domain = identity.partition('@')
        if not domain:
            return identity
        return f"{local[:1]}***@{domain}"

    def send(self, identity: str, message: OtpMessage) -> bool:
        try:
            self.email_service.send_email({
                'event': self.event_name,
                'data': message.parameters(),
                'to_emails': [identity],
            })
        except Exception:
            logger.exception("Failed to send email code to %s", self.mask_identity(identity))
            return False
        return True
