"""
TwoFactorAccountState model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from dateutil.parser import isoparse

from .enums import Channel, MethodKind
from .versioned_model import VersionedModel


@dataclass
class MethodState:
    """Enrollment flag of a single channel."""

    enabled: bool = False
    enabled_at: Optional[datetime] = None

    def as_dict(self, convert_datetime_to_iso_string: bool = False) -> Dict[str, Any]:
        enabled_at = self.enabled_at
        if convert_datetime_to_iso_string and enabled_at is not None:
            enabled_at = enabled_at.isoformat()
        return {'enabled': self.enabled, 'enabled_at': enabled_at}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MethodState':
        enabled_at = data.get('enabled_at')
        if isinstance(enabled_at, str):
            enabled_at = isoparse(enabled_at)
        return cls(enabled=bool(data.get('enabled')), enabled_at=enabled_at)


def _empty_methods() -> Dict[Channel, MethodState]:
    return {channel: MethodState() for channel in Channel}


@dataclass
class TwoFactorAccountState(VersionedModel):
    """
    The 2FA state of one account.

    Only the coordinator writes this record. ``enabled`` is true iff a method
    is enabled, and ``default_method`` names that method.
    ``failed_attempts`` counts consecutive rejected login-time codes.
    """

    user_id: Optional[str] = None
    enabled: bool = False
    default_method: MethodKind = MethodKind.NONE
    methods: Dict[Channel, MethodState] = field(default_factory=_empty_methods)
    failed_attempts: int = 0
    locked_until: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TwoFactorAccountState':
        data = dict(data)
        raw_methods = data.pop('methods', None) or {}
        instance = super().from_dict(data)
        methods = _empty_methods()
        for key, value in raw_methods.items():
            methods[Channel(key)] = value if isinstance(value, MethodState) else MethodState.from_dict(value)
        instance.methods = methods
        return instance

    def is_method_enabled(self, channel: Channel) -> bool:
        return self.methods[channel].enabled

    @property
    def enabled_channels(self):
        return [channel for channel, state in self.methods.items() if state.enabled]

    def validate_default_method(self):
        """A default method must point at an enabled channel."""
        if self.default_method == MethodKind.NONE:
            if self.enabled:
                return "An enabled account needs a default method."
            return None
        channel = Channel(self.default_method.value)
        if not self.methods[channel].enabled:
            return f"Default method {channel} is not enabled."
        return None

    def validate_enabled(self):
        if self.enabled != any(state.enabled for state in self.methods.values()):
            return "'enabled' must reflect whether any method is enabled."
        return None

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and now < self.locked_until
