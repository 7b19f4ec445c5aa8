"""
Verification session store: one pending code per (user, channel).
"""
import logging
import secrets
import threading
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Union

from warden.channels.base import ChannelAdapter
from warden.models.enums import Channel
from warden.models.verification_session import ResendDenied, VerificationSession
from warden.models.versioned_model import default_datetime
from warden.otp.backends import SessionBackend
from warden.otp.codes import codes_match, generate_numeric_code, is_well_formed
from warden.policy import TwoFactorPolicy

logger = logging.getLogger(__name__)


class CodeCheck(str, Enum):
    """Detailed outcome of a code check."""
    OK = 'OK'
    NOT_FOUND = 'NOT_FOUND'
    EXPIRED = 'EXPIRED'
    MISMATCH = 'MISMATCH'
    ATTEMPTS_EXCEEDED = 'ATTEMPTS_EXCEEDED'


class VerificationSessionStore:
    """
    Lifecycle of pending one-time codes for a single code channel.

    A session is created on setup, superseded by the next ``create_session``
    for the same user, regenerated in place by ``resend_code`` and deleted by
    a successful check. The backend keeps it until ``expires_at`` plus the
    policy grace period so an expired session can still be resent.
    """

    def __init__(
        self,
        adapter: ChannelAdapter,
        backend: SessionBackend,
        policy: TwoFactorPolicy = None,
        clock: Callable[[], datetime] = default_datetime
    ):
        if not adapter.channel.uses_one_time_code:
            raise ValueError(f"{adapter.channel} does not use verification sessions")
        self.adapter = adapter
        self.backend = backend
        self.policy = policy or TwoFactorPolicy()
        self.clock = clock
        self._lock = threading.RLock()

    @property
    def channel(self) -> Channel:
        return self.adapter.channel

    def _session_key(self, session_id: str) -> str:
        return f"{self.channel.value}:session:{session_id}"

    def _user_key(self, user_id: str) -> str:
        return f"{self.channel.value}:user:{user_id}"

    @property
    def _retention(self) -> int:
        return self.policy.otp_ttl + self.policy.otp_grace_period

    def _load(self, session_id: str) -> Optional[VerificationSession]:
        data = self.backend.get(self._session_key(session_id))
        return VerificationSession.from_dict(data) if data else None

    def _store(self, session: VerificationSession):
        self.backend.set(self._session_key(session.session_id), session.as_dict(), self._retention)
        self.backend.set(self._user_key(session.user_id), session.session_id, self._retention)

    def _delete(self, session: VerificationSession):
        keys = [self._session_key(session.session_id)]
        if self.backend.get(self._user_key(session.user_id)) == session.session_id:
            keys.append(self._user_key(session.user_id))
        self.backend.delete(*keys)

    def create_session(self, user_id: str, identity: str) -> VerificationSession:
        """
        Issue a new code for ``identity``, replacing any session the user has on this channel.

        Raises:
            InvalidIdentity: if ``identity`` fails the channel's format check.
        """
        target = self.adapter.normalize_identity(identity)
        now = self.clock()
        session = VerificationSession(
            session_id=secrets.token_urlsafe(16),
            user_id=user_id,
            channel=self.channel,
            target_identity=target,
            code=generate_numeric_code(self.policy.otp_length),
            issued_at=now,
            expires_at=now + timedelta(seconds=self.policy.otp_ttl),
            resend_eligible_at=now + timedelta(seconds=self.policy.resend_cooldown_for(0)),
        )
        with self._lock:
            previous = self.get_user_session(user_id)
            if previous is not None:
                self.backend.delete(self._session_key(previous.session_id))
                logger.info("Superseded %s session for user %s", self.channel, user_id)
            self._store(session)
        logger.info("Created %s session for user %s (%s)", self.channel, user_id,
                    self.adapter.mask_identity(target))
        return session

    def get_user_session(self, user_id: str) -> Optional[VerificationSession]:
        """The user's session on this channel, expired or not, until it is purged."""
        with self._lock:
            session_id = self.backend.get(self._user_key(user_id))
            if session_id is None:
                return None
            return self._load(session_id)

    def check_code(self, session_id: str, submitted: str) -> CodeCheck:
        """
        Check ``submitted`` against the session and consume the session on a match.
        """
        with self._lock:
            session = self._load(session_id)
            if session is None:
                return CodeCheck.NOT_FOUND
            now = self.clock()
            if session.is_expired(now):
                return CodeCheck.EXPIRED
            if session.attempt_count >= self.policy.max_verify_attempts:
                return CodeCheck.ATTEMPTS_EXCEEDED

            session.attempt_count += 1
            if is_well_formed(submitted, self.policy.otp_length) and codes_match(session.code, submitted):
                self._delete(session)
                logger.info("Verified %s session for user %s", self.channel, session.user_id)
                return CodeCheck.OK

            self._store(session)
            logger.info("Rejected %s code for user %s (attempt %d of %d)", self.channel,
                        session.user_id, session.attempt_count, self.policy.max_verify_attempts)
            return CodeCheck.MISMATCH

    def verify_code(self, session_id: str, submitted: str) -> bool:
        """Fails closed: True only for a live, unconsumed session with a matching code."""
        return self.check_code(session_id, submitted) is CodeCheck.OK

    def resend_code(self, session_id: str) -> Union[VerificationSession, ResendDenied, None]:
        """
        Regenerate the code of an existing session, keeping its id and identity.

        Returns the updated session, ``ResendDenied`` while the cooldown runs,
        or None when the session no longer exists.
        """
        with self._lock:
            session = self._load(session_id)
            if session is None:
                return None
            now = self.clock()
            if now < session.resend_eligible_at:
                return ResendDenied(retry_after=session.seconds_until_resend(now), session=session)

            session.code = generate_numeric_code(self.policy.otp_length)
            session.issued_at = now
            session.expires_at = now + timedelta(seconds=self.policy.otp_ttl)
            session.resend_eligible_at = now + timedelta(
                seconds=self.policy.resend_cooldown_for(session.resend_count + 1))
            session.resend_count += 1
            session.attempt_count = 0
            self._store(session)
        logger.info("Regenerated %s code for user %s (resend %d)", self.channel,
                    session.user_id, session.resend_count)
        return session

    def invalidate(self, user_id: str) -> bool:
        """Drops the user's pending session. Returns True if there was one."""
        with self._lock:
            session = self.get_user_session(user_id)
            if session is None:
                self.backend.delete(self._user_key(user_id))
                return False
            self._delete(session)
            return True

    def purge_expired(self) -> int:
        return self.backend.purge_expired()
