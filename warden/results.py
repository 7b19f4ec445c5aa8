"""
Structured results returned by the coordinator, vault and registry.

User mistakes and policy denials come back as results with a distinct
status and message; only upstream failures are raised.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from warden.models.enums import Channel
from warden.models.device_session import DeviceSession


class SetupStatus(str, Enum):
    STARTED = 'STARTED'
    INVALID_IDENTITY = 'INVALID_IDENTITY'
    MISSING_IDENTITY = 'MISSING_IDENTITY'


class VerifyStatus(str, Enum):
    VERIFIED = 'VERIFIED'
    INVALID_CODE = 'INVALID_CODE'
    EXPIRED = 'EXPIRED'
    ATTEMPTS_EXCEEDED = 'ATTEMPTS_EXCEEDED'
    NO_PENDING_SETUP = 'NO_PENDING_SETUP'


class ResendStatus(str, Enum):
    SENT = 'SENT'
    COOLDOWN = 'COOLDOWN'
    NO_PENDING_SETUP = 'NO_PENDING_SETUP'
    UNSUPPORTED = 'UNSUPPORTED'


class DisableStatus(str, Enum):
    DISABLED = 'DISABLED'
    ALREADY_DISABLED = 'ALREADY_DISABLED'


class RevokeStatus(str, Enum):
    REVOKED = 'REVOKED'
    ALREADY_REVOKED = 'ALREADY_REVOKED'
    NOT_FOUND = 'NOT_FOUND'
    PARTIAL = 'PARTIAL'


VERIFY_MESSAGES = {
    VerifyStatus.VERIFIED: "Verification successful.",
    VerifyStatus.INVALID_CODE: "Invalid code.",
    VerifyStatus.EXPIRED: "Code expired, request a new one.",
    VerifyStatus.ATTEMPTS_EXCEEDED: "Too many attempts, request a new code.",
    VerifyStatus.NO_PENDING_SETUP: "No pending setup for this method.",
}


@dataclass(frozen=True)
class SetupResult:
    """Outcome of ``begin_setup``.

    For code channels ``session_id``, ``expires_at`` and ``masked_identity``
    are set. For the authenticator ``secret`` and ``provisioning_uri`` are.
    """

    channel: Channel
    status: SetupStatus
    session_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    resend_available_in: Optional[int] = None
    masked_identity: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    provisioning_uri: Optional[str] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status is SetupStatus.STARTED

    @property
    def message(self) -> str:
        if self.status is SetupStatus.INVALID_IDENTITY:
            if self.channel is Channel.EMAIL:
                return "Invalid email address."
            return "Invalid phone number."
        if self.status is SetupStatus.MISSING_IDENTITY:
            if self.channel is Channel.EMAIL:
                return "Add an email address to your account first."
            return "Add a phone number to your account first."
        if self.channel is Channel.AUTHENTICATOR:
            return "Scan the QR code with your authenticator app."
        return f"Verification code sent to {self.masked_identity}."


@dataclass(frozen=True)
class VerifyResult:
    channel: Optional[Channel]
    status: VerifyStatus

    @property
    def ok(self) -> bool:
        return self.status is VerifyStatus.VERIFIED

    @property
    def retryable(self) -> bool:
        """True when the same code entry can be retried without a new code."""
        return self.status is VerifyStatus.INVALID_CODE

    @property
    def message(self) -> str:
        return VERIFY_MESSAGES[self.status]


@dataclass(frozen=True)
class ResendResult:
    channel: Channel
    status: ResendStatus
    expires_at: Optional[datetime] = None
    retry_after: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is ResendStatus.SENT

    @property
    def message(self) -> str:
        if self.status is ResendStatus.COOLDOWN:
            return f"Please wait {self.retry_after} seconds before resending."
        if self.status is ResendStatus.NO_PENDING_SETUP:
            return "No pending setup for this method."
        if self.status is ResendStatus.UNSUPPORTED:
            return "Authenticator codes cannot be resent."
        return "A new code has been sent."


@dataclass(frozen=True)
class DisableResult:
    status: DisableStatus
    channels: List[Channel] = field(default_factory=list)
    revoked_sessions: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True

    @property
    def message(self) -> str:
        if self.status is DisableStatus.ALREADY_DISABLED:
            return "Method already disabled."
        return "Two-factor method disabled."


@dataclass(frozen=True)
class RevokeResult:
    status: RevokeStatus
    revoked_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (RevokeStatus.REVOKED, RevokeStatus.ALREADY_REVOKED)

    @property
    def count(self) -> int:
        return len(self.revoked_ids)

    @property
    def message(self) -> str:
        if self.status is RevokeStatus.NOT_FOUND:
            return "Session not found."
        if self.status is RevokeStatus.PARTIAL:
            return f"{len(self.failed_ids)} session(s) could not be revoked, try again."
        return f"{self.count} session(s) revoked."


@dataclass(frozen=True)
class SessionPage:
    sessions: List[DeviceSession]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass(frozen=True)
class BackupCodeInfo:
    code: str = field(repr=False)
    created_at: datetime
