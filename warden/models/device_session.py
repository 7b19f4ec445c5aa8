"""
DeviceSession model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from .enums import RiskLevel, SessionStatus
from .versioned_model import VersionedModel

RISK_FLAGS = (
    'suspicious_login',
    'new_device',
    'new_location',
    'brute_force_attempt',
    'concurrent_session',
)


@dataclass(repr=False)
class DeviceSession(VersionedModel):
    """An authenticated session bound to an account."""

    user_id: Optional[str] = None
    token_id: Optional[str] = field(default=None, metadata={'sensitive': True})
    device_fingerprint: Optional[str] = None
    device_name: Optional[str] = None
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    last_seen_at: Optional[datetime] = None
    risk_score: int = 0
    risk_flags: Dict[str, bool] = field(default_factory=dict)
    revoked: bool = False
    revoked_at: Optional[datetime] = None

    def validate_risk_score(self):
        if not isinstance(self.risk_score, int) or not 0 <= self.risk_score <= 100:
            return f"risk_score must be an integer between 0 and 100, got {self.risk_score!r}."
        return None

    def validate_risk_flags(self):
        unknown = set(self.risk_flags) - set(RISK_FLAGS)
        if unknown:
            return f"Unknown risk flags: {', '.join(sorted(unknown))}."
        return None

    def risk_level(self, medium_threshold: int = 34, high_threshold: int = 67) -> RiskLevel:
        """Map ``risk_score`` to a level: below ``medium_threshold`` is LOW, from
        ``high_threshold`` up is HIGH."""
        if self.risk_score >= high_threshold:
            return RiskLevel.HIGH
        if self.risk_score >= medium_threshold:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def status_at(self, now: datetime, online_window: int = 300, idle_window: int = 1800) -> SessionStatus:
        """Presence derived from ``last_seen_at``; revocation wins over everything."""
        if self.revoked:
            return SessionStatus.REVOKED
        if self.is_expired(now) or self.last_seen_at is None:
            return SessionStatus.OFFLINE
        idle_for = (now - self.last_seen_at).total_seconds()
        if idle_for <= online_window:
            return SessionStatus.ONLINE
        if idle_for <= idle_window:
            return SessionStatus.IDLE
        return SessionStatus.OFFLINE
