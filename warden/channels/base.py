from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from warden.exceptions import InvalidIdentity
from warden.models.enums import Channel


@dataclass(frozen=True)
class OtpMessage:
    """Content of a one-time code message, rendered by the provider's event template."""

    code: str = field(repr=False)
    expires_in: int
    app_name: str

    def parameters(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'app_name': self.app_name,
            'expires_in': self.expires_in,
            'expires_minutes': max(1, self.expires_in // 60),
        }


class ChannelAdapter(ABC):
    """
        Per-channel identity validation and delivery.
    """
    channel: Channel

    def validate_identity(self, identity: str) -> bool:
        try:
            self.normalize_identity(identity)
        except InvalidIdentity:
            return False
        return True

    @abstractmethod
    def normalize_identity(self, identity: str) -> str:
        """
        Returns the canonical form of ``identity`` or raises ``InvalidIdentity``.
        """
        raise NotImplementedError

    @abstractmethod
    def mask_identity(self, identity: str) -> str:
        """
        Returns ``identity`` with most characters hidden, for display.
        """
        raise NotImplementedError

    @abstractmethod
    def send(self, identity: str, message: OtpMessage) -> bool:
        """
        Hands ``message`` to the gateway. True means the gateway accepted it,
        not that it was delivered.
        """
        raise NotImplementedError
