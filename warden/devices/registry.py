"""
Device/session trust registry.
"""
import hashlib
import hmac
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

from warden.auth.tokens import generate_session_token, validate_session_token
from warden.models.device_session import DeviceSession, RISK_FLAGS
from warden.models.enums import RiskLevel, SessionStatus
from warden.models.versioned_model import default_datetime
from warden.policy import TwoFactorPolicy
from warden.repositories.two_factor_repositories import DeviceSessionRepository
from warden.results import RevokeResult, RevokeStatus, SessionPage

logger = logging.getLogger(__name__)

RISK_WEIGHTS = {
    'suspicious_login': 40,
    'brute_force_attempt': 35,
    'new_location': 20,
    'new_device': 15,
    'concurrent_session': 10,
}


def compute_risk_score(flags: Optional[Dict[str, bool]]) -> int:
    """Sum of the weights of the raised flags, capped at 100."""
    return min(100, sum(RISK_WEIGHTS[name] for name, raised in (flags or {}).items() if raised))


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


class DeviceTrustRegistry:
    """
    Owns the ``DeviceSession`` records of every account.

    Revocation is terminal: a revoked session is never reactivated, a new
    login opens a new session.
    """

    def __init__(
        self,
        repository: DeviceSessionRepository,
        policy: TwoFactorPolicy = None,
        clock: Callable[[], datetime] = default_datetime
    ):
        self.repository = repository
        self.policy = policy or TwoFactorPolicy()
        self.clock = clock

    def risk_level(self, session: DeviceSession) -> RiskLevel:
        return session.risk_level(self.policy.risk_medium_threshold, self.policy.risk_high_threshold)

    def status(self, session: DeviceSession) -> SessionStatus:
        return session.status_at(self.clock(), self.policy.online_window, self.policy.idle_window)

    def to_api(self, session: DeviceSession) -> Dict[str, Any]:
        """Serializable view of a session with derived fields, without the token hash."""
        data = session.as_dict(convert_datetime_to_iso_string=True)
        data.pop('token_id', None)
        data['risk_level'] = self.risk_level(session).value
        data['status'] = self.status(session).value
        return data

    def open_session(
        self,
        user_id: str,
        device_fingerprint: str,
        ip_address: Optional[str] = None,
        device_name: Optional[str] = None,
        user_agent: Optional[str] = None,
        risk_flags: Optional[Dict[str, bool]] = None,
        risk_score: Optional[int] = None
    ) -> Tuple[DeviceSession, str]:
        """
        Record a new authenticated session. Returns the session and its bearer token.
        """
        now = self.clock()
        flags = {name: bool(raised) for name, raised in (risk_flags or {}).items()}
        unknown = set(flags) - set(RISK_FLAGS)
        if unknown:
            raise ValueError(f"Unknown risk flags: {', '.join(sorted(unknown))}")
        session = DeviceSession(
            user_id=user_id,
            device_fingerprint=device_fingerprint,
            device_name=device_name,
            user_agent=user_agent,
            ip_address=ip_address,
            created_at=now,
            last_seen_at=now,
            expires_at=now + timedelta(seconds=self.policy.device_session_ttl),
            risk_flags=flags,
            risk_score=compute_risk_score(flags) if risk_score is None else risk_score,
        )
        token, _ = generate_session_token(session.entity_id, self.policy.token_secret_key,
                                          self.policy.device_session_ttl)
        session.token_id = _hash_token(token)
        self.repository.save(session)
        logger.info("Opened session %s for user %s (risk %s)", session.entity_id, user_id,
                    self.risk_level(session).value)
        return session, token

    def get_session(self, session_id: str) -> Optional[DeviceSession]:
        return self.repository.get_one({'entity_id': session_id})

    def touch(self, token: str) -> Optional[DeviceSession]:
        """
        Resolve a bearer token to its live session and refresh ``last_seen_at``.
        Returns None for forged, revoked or expired tokens.
        """
        session_id = validate_session_token(token, self.policy.token_secret_key)
        if not session_id:
            return None
        session = self.get_session(session_id)
        if session is None or not hmac.compare_digest(session.token_id or '', _hash_token(token)):
            return None
        now = self.clock()
        if session.revoked or session.is_expired(now):
            return None
        session.last_seen_at = now
        self.repository.save(session)
        return session

    def list_sessions(self, user_id: str, page: int = 1, limit: Optional[int] = None,
                      include_revoked: bool = False) -> SessionPage:
        limit = limit or self.policy.sessions_page_size
        page = max(1, page)
        sessions = self.repository.get_for_user(user_id, include_revoked=include_revoked,
                                                limit=limit, offset=(page - 1) * limit)
        total = self.repository.count_for_user(user_id, include_revoked=include_revoked)
        return SessionPage(sessions=sessions, page=page, limit=limit, total=total)

    def _mark_revoked(self, session: DeviceSession):
        session.revoked = True
        session.revoked_at = self.clock()
        self.repository.save(session)

    def revoke(self, session_id: str) -> RevokeResult:
        """
        Revoke one session. Storage failures propagate as ``RetryableError``.
        """
        session = self.get_session(session_id)
        if session is None:
            return RevokeResult(status=RevokeStatus.NOT_FOUND, failed_ids=[session_id])
        if session.revoked:
            return RevokeResult(status=RevokeStatus.ALREADY_REVOKED)
        self._mark_revoked(session)
        logger.info("Revoked session %s of user %s", session_id, session.user_id)
        return RevokeResult(status=RevokeStatus.REVOKED, revoked_ids=[session_id])

    def revoke_all(self, user_id: str, except_session_id: Optional[str] = None) -> RevokeResult:
        """
        Revoke every live session of the user except ``except_session_id``.
        Sessions that could not be written, for any storage error, are listed
        in ``failed_ids`` and the rest of the batch is still attempted.
        """
        revoked, failed = [], []
        for session in self.repository.get_for_user(user_id, limit=None):
            if session.entity_id == except_session_id:
                continue
            try:
                self._mark_revoked(session)
            except Exception as ex:
                logger.error("Could not revoke session %s of user %s: %s", session.entity_id, user_id, ex)
                failed.append(session.entity_id)
            else:
                revoked.append(session.entity_id)

        logger.info("Revoked %d session(s) of user %s, %d failed", len(revoked), user_id, len(failed))
        status = RevokeStatus.PARTIAL if failed else RevokeStatus.REVOKED
        return RevokeResult(status=status, revoked_ids=revoked, failed_ids=failed)

    def sweep_expired(self) -> int:
        """Logically deletes sessions past their expiry. Returns how many were removed."""
        now = self.clock()
        expired = [s for s in self.repository.get_many({}, limit=None) if s.is_expired(now)]
        for session in expired:
            session.active = False
        if expired:
            self.repository.save_many(expired)
        return len(expired)
