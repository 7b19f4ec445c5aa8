"""Enums shared by the two-factor models"""
from enum import Enum


class Channel(str, Enum):
    """A 2FA delivery channel."""
    SMS = 'SMS'
    WHATSAPP = 'WHATSAPP'
    EMAIL = 'EMAIL'
    AUTHENTICATOR = 'AUTHENTICATOR'

    def __str__(self):
        return str(self.value)

    @property
    def uses_one_time_code(self) -> bool:
        """True for channels that deliver a code through a verification session."""
        return self is not Channel.AUTHENTICATOR


class MethodKind(str, Enum):
    """The default method of an account, ``NONE`` when 2FA is off."""
    NONE = 'NONE'
    SMS = 'SMS'
    WHATSAPP = 'WHATSAPP'
    EMAIL = 'EMAIL'
    AUTHENTICATOR = 'AUTHENTICATOR'

    def __str__(self):
        return str(self.value)

    @classmethod
    def for_channel(cls, channel: Channel) -> 'MethodKind':
        return cls(channel.value)


class ChannelState(str, Enum):
    """Enrollment state of one channel for one user."""
    SETUP = 'SETUP'
    VERIFY = 'VERIFY'
    ENABLED = 'ENABLED'


class RiskLevel(str, Enum):
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'


class SessionStatus(str, Enum):
    ONLINE = 'ONLINE'
    IDLE = 'IDLE'
    OFFLINE = 'OFFLINE'
    REVOKED = 'REVOKED'
