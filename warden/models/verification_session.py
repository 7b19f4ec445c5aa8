"""
VerificationSession model
"""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from dateutil.parser import isoparse

from .enums import Channel


@dataclass(kw_only=True)
class VerificationSession:
    """A pending one-time code for one (user, channel) enrollment attempt."""

    session_id: str
    user_id: str
    channel: Channel
    target_identity: str
    code: str = field(repr=False)
    issued_at: datetime
    expires_at: datetime
    resend_eligible_at: datetime
    attempt_count: int = 0
    resend_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def seconds_until_resend(self, now: datetime) -> int:
        remaining = (self.resend_eligible_at - now).total_seconds()
        return max(0, math.ceil(remaining))

    def seconds_until_expiry(self, now: datetime) -> int:
        return max(0, int((self.expires_at - now).total_seconds()))

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['channel'] = self.channel.value
        for key in ('issued_at', 'expires_at', 'resend_eligible_at'):
            data[key] = data[key].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VerificationSession':
        data = dict(data)
        data['channel'] = Channel(data['channel'])
        for key in ('issued_at', 'expires_at', 'resend_eligible_at'):
            if isinstance(data[key], str):
                data[key] = isoparse(data[key])
        return cls(**data)


@dataclass(frozen=True)
class ResendDenied:
    """Returned instead of a session while the resend cooldown is running."""

    retry_after: int
    session: Optional[VerificationSession] = None
