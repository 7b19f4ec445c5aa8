"""
TotpCredential model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .versioned_model import VersionedModel


@dataclass(repr=False)
class TotpCredential(VersionedModel):
    """
    Authenticator app credential of a user.

    ``secret`` is the trusted secret, ``pending_secret`` the one issued by a
    setup that has not been verified yet. ``last_used_step`` is the newest
    time step a code was accepted for; codes at or before it are refused.
    """

    user_id: Optional[str] = None
    secret: Optional[str] = field(default=None, metadata={'sensitive': True})
    pending_secret: Optional[str] = field(default=None, metadata={'sensitive': True})
    pending_created_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    label: Optional[str] = None
    last_used_step: Optional[int] = None

    @property
    def is_enrolled(self) -> bool:
        return bool(self.secret)

    @property
    def has_pending_secret(self) -> bool:
        return bool(self.pending_secret)
