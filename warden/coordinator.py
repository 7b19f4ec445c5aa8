"""
The two-factor method coordinator.

A single state machine drives every channel: ``begin_setup`` moves a channel
to VERIFY, a successful ``verify`` commits it as the account's only enabled
method and default, ``disable`` takes it back to SETUP. Only this class
writes ``TwoFactorAccountState``.
"""
import logging
import threading
import weakref
from contextlib import ExitStack
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from warden.backup.vault import BackupCodeVault
from warden.channels.base import ChannelAdapter, OtpMessage
from warden.data.base import DbAdapter
from warden.devices.registry import DeviceTrustRegistry
from warden.exceptions import DeliveryError, InvalidIdentity, MissingIdentity, UnsupportedChannel
from warden.models import (
    Channel,
    ChannelState,
    MethodKind,
    MethodState,
    ResendDenied,
    TotpCredential,
    TwoFactorAccountState,
    VerificationSession,
)
from warden.models.versioned_model import default_datetime
from warden.otp.backends import MemorySessionBackend, SessionBackend
from warden.otp.session_store import CodeCheck, VerificationSessionStore
from warden.policy import TwoFactorPolicy
from warden.repositories.base_repository import BaseRepository
from warden.repositories.two_factor_repositories import (
    AccountStateRepository,
    BackupCodeRepository,
    TotpCredentialRepository,
)
from warden.results import (
    DisableResult,
    DisableStatus,
    ResendResult,
    ResendStatus,
    SetupResult,
    SetupStatus,
    VerifyResult,
    VerifyStatus,
)
from warden.totp.engine import TotpEngine

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[str, Channel], Optional[str]]

CODE_CHECK_STATUS = {
    CodeCheck.OK: VerifyStatus.VERIFIED,
    CodeCheck.MISMATCH: VerifyStatus.INVALID_CODE,
    CodeCheck.EXPIRED: VerifyStatus.EXPIRED,
    CodeCheck.ATTEMPTS_EXCEEDED: VerifyStatus.ATTEMPTS_EXCEEDED,
    CodeCheck.NOT_FOUND: VerifyStatus.NO_PENDING_SETUP,
}


class _LockRegistry:
    """
    Lazily created re-entrant locks keyed by arbitrary hashables.

    A lock lives only while someone holds a reference to it.
    """

    def __init__(self):
        self._locks: 'weakref.WeakValueDictionary[Tuple, threading.RLock]' = weakref.WeakValueDictionary()
        self._guard = threading.Lock()

    def __len__(self):
        return len(self._locks)

    def get(self, *key) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


class TwoFactorCoordinator:
    """
    Enrollment, verification and disabling of 2FA methods.

    Args:
        adapter: Durable store for account state, TOTP credentials and backup codes.
        channels: Delivery adapters of the code channels (SMS, WhatsApp, email).
        session_backend: Store of pending verification sessions.
        identity_provider: ``(user_id, channel) -> phone/email`` lookup used
            when ``begin_setup`` is called without an identity.
        device_registry: Informed when methods are disabled, if the policy asks for it.
    """

    def __init__(
        self,
        adapter: DbAdapter,
        channels: Iterable[ChannelAdapter] = (),
        session_backend: Optional[SessionBackend] = None,
        totp_engine: Optional[TotpEngine] = None,
        backup_vault: Optional[BackupCodeVault] = None,
        device_registry: Optional[DeviceTrustRegistry] = None,
        identity_provider: Optional[IdentityProvider] = None,
        policy: Optional[TwoFactorPolicy] = None,
        clock: Callable[[], datetime] = default_datetime
    ):
        self.policy = policy or TwoFactorPolicy()
        self.clock = clock
        self.accounts = AccountStateRepository(adapter)
        self.totp_credentials = TotpCredentialRepository(adapter)
        self.totp_engine = totp_engine or TotpEngine(
            issuer=self.policy.totp_issuer,
            digits=self.policy.totp_digits,
            interval=self.policy.totp_interval,
            valid_window=self.policy.totp_valid_window,
        )
        self.backup_vault = backup_vault or BackupCodeVault(BackupCodeRepository(adapter), self.policy, clock)
        self.device_registry = device_registry
        self.identity_provider = identity_provider

        backend = session_backend or MemorySessionBackend(clock)
        self.stores: Dict[Channel, VerificationSessionStore] = {
            channel_adapter.channel: VerificationSessionStore(channel_adapter, backend, self.policy, clock)
            for channel_adapter in channels
        }
        self._channel_locks = _LockRegistry()
        self._account_locks = _LockRegistry()

    # State

    def _store_for(self, channel: Channel) -> VerificationSessionStore:
        store = self.stores.get(channel)
        if store is None:
            raise UnsupportedChannel(channel, 'Code delivery')
        return store

    def _load_state(self, user_id: str) -> TwoFactorAccountState:
        with self._account_locks.get(user_id):
            state = self.accounts.get_for_user(user_id)
            if state is None:
                state = self.accounts.save(TwoFactorAccountState(user_id=user_id))
            return state

    def get_state(self, user_id: str) -> TwoFactorAccountState:
        """The committed 2FA state of the account."""
        return self._load_state(user_id)

    def get_channel_state(self, user_id: str, channel: Channel) -> ChannelState:
        if channel is Channel.AUTHENTICATOR:
            credential = self.totp_credentials.get_for_user(user_id)
            pending = credential is not None and credential.has_pending_secret
        else:
            pending = self._store_for(channel).get_user_session(user_id) is not None
        if pending:
            return ChannelState.VERIFY
        if self.get_state(user_id).is_method_enabled(channel):
            return ChannelState.ENABLED
        return ChannelState.SETUP

    def _lookup_identity(self, user_id: str, channel: Channel) -> Optional[str]:
        if self.identity_provider is None:
            return None
        return self.identity_provider(user_id, channel)

    def _resolve_identity(self, user_id: str, channel: Channel, identity: Optional[str]) -> str:
        identity = identity or self._lookup_identity(user_id, channel)
        if not identity:
            raise MissingIdentity(channel)
        return identity

    # Setup

    def _deliver(self, store: VerificationSessionStore, session: VerificationSession):
        message = OtpMessage(code=session.code, expires_in=self.policy.otp_ttl, app_name=self.policy.app_name)
        if not store.adapter.send(session.target_identity, message):
            store.invalidate(session.user_id)
            logger.warning("Delivery of %s code failed for user %s", store.channel, session.user_id)
            raise DeliveryError(store.channel)

    def begin_setup(self, user_id: str, channel: Channel, identity: Optional[str] = None) -> SetupResult:
        """
        Start enrolling ``channel``.

        Raises:
            DeliveryError: the gateway refused the code; no session is left behind.
        """
        channel = Channel(channel)
        with self._channel_locks.get(user_id, channel):
            if channel is Channel.AUTHENTICATOR:
                return self._begin_totp_setup(user_id, identity)

            store = self._store_for(channel)
            try:
                session = store.create_session(user_id, self._resolve_identity(user_id, channel, identity))
            except MissingIdentity:
                return SetupResult(channel=channel, status=SetupStatus.MISSING_IDENTITY)
            except InvalidIdentity:
                return SetupResult(channel=channel, status=SetupStatus.INVALID_IDENTITY)

            self._deliver(store, session)
            now = self.clock()
            return SetupResult(
                channel=channel,
                status=SetupStatus.STARTED,
                session_id=session.session_id,
                expires_at=session.expires_at,
                resend_available_in=session.seconds_until_resend(now),
                masked_identity=store.adapter.mask_identity(session.target_identity),
            )

    def _begin_totp_setup(self, user_id: str, identity: Optional[str]) -> SetupResult:
        label = (identity
                 or self._lookup_identity(user_id, Channel.AUTHENTICATOR)
                 or self._lookup_identity(user_id, Channel.EMAIL)
                 or user_id)
        issued = self.totp_engine.generate_secret(label, self.policy.totp_issuer)
        credential = self.totp_credentials.get_for_user(user_id) or TotpCredential(user_id=user_id)
        # An enrolled secret keeps working until the new one is verified.
        credential.pending_secret = issued.secret
        credential.pending_created_at = self.clock()
        credential.label = label
        self.totp_credentials.save(credential)
        logger.info("Issued pending authenticator secret for user %s (rotation: %s)",
                    user_id, credential.is_enrolled)
        return SetupResult(
            channel=Channel.AUTHENTICATOR,
            status=SetupStatus.STARTED,
            secret=issued.secret,
            provisioning_uri=issued.provisioning_uri,
        )

    # Verification

    def verify(self, user_id: str, channel: Channel, code: str) -> VerifyResult:
        """
        Check the code of a pending setup and, on success, make ``channel``
        the account's enabled default method in one commit.
        """
        channel = Channel(channel)
        with self._channel_locks.get(user_id, channel):
            if channel is Channel.AUTHENTICATOR:
                return self._verify_totp(user_id, code)

            store = self._store_for(channel)
            session = store.get_user_session(user_id)
            if session is None:
                return VerifyResult(channel=channel, status=VerifyStatus.NO_PENDING_SETUP)
            status = CODE_CHECK_STATUS[store.check_code(session.session_id, code)]
            if status is VerifyStatus.VERIFIED:
                self._enable(user_id, channel)
            return VerifyResult(channel=channel, status=status)

    def _verify_totp(self, user_id: str, code: str) -> VerifyResult:
        credential = self.totp_credentials.get_for_user(user_id)
        if credential is None or not credential.has_pending_secret:
            return VerifyResult(channel=Channel.AUTHENTICATOR, status=VerifyStatus.NO_PENDING_SETUP)
        step = self.totp_engine.match_step(credential.pending_secret, code, self.clock())
        if step is None:
            logger.info("Rejected authenticator code during setup for user %s", user_id)
            return VerifyResult(channel=Channel.AUTHENTICATOR, status=VerifyStatus.INVALID_CODE)

        credential.secret = credential.pending_secret
        credential.pending_secret = None
        credential.pending_created_at = None
        credential.verified_at = self.clock()
        credential.last_used_step = step
        self._enable(user_id, Channel.AUTHENTICATOR, credential)
        return VerifyResult(channel=Channel.AUTHENTICATOR, status=VerifyStatus.VERIFIED)

    def _erase_totp(self, credential: Optional[TotpCredential]) -> List[Tuple[BaseRepository, TotpCredential]]:
        if credential is None:
            return []
        credential.secret = None
        credential.pending_secret = None
        credential.pending_created_at = None
        credential.active = False
        return [(self.totp_credentials, credential)]

    def _enable(self, user_id: str, channel: Channel, credential: Optional[TotpCredential] = None):
        with self._account_locks.get(user_id):
            state = self._load_state(user_id)
            related = [(self.totp_credentials, credential)] if credential is not None else []
            for other in state.enabled_channels:
                if other is channel:
                    continue
                state.methods[other] = MethodState()
                if other is Channel.AUTHENTICATOR:
                    related.extend(self._erase_totp(self.totp_credentials.get_for_user(user_id)))
                logger.info("Replaced %s with %s as the 2FA method of user %s", other, channel, user_id)

            state.methods[channel] = MethodState(enabled=True, enabled_at=self.clock())
            state.default_method = MethodKind.for_channel(channel)
            state.enabled = True
            self.accounts.save(state, related=related)
        logger.info("Enabled %s for user %s", channel, user_id)

    def _accept_totp(self, credential: Optional[TotpCredential], code: str, now: datetime) -> Optional[int]:
        if credential is None or not credential.is_enrolled:
            return None
        step = self.totp_engine.match_step(credential.secret, code, now)
        if step is None:
            return None
        if credential.last_used_step is not None and step <= credential.last_used_step:
            logger.warning("Refused reused authenticator code for user %s", credential.user_id)
            return None
        return step

    def verify_second_factor(self, user_id: str, code: str) -> VerifyResult:
        """
        Login-time check: a code from the enrolled authenticator, or an unused backup code.

        An authenticator code is accepted once; later codes must belong to a
        newer time step. After ``max_verify_attempts`` consecutive rejections
        every code is refused for ``second_factor_lockout`` seconds.
        """
        with self._account_locks.get(user_id):
            state = self._load_state(user_id)
            if not state.enabled:
                return VerifyResult(channel=None, status=VerifyStatus.NO_PENDING_SETUP)
            now = self.clock()
            if state.is_locked(now):
                logger.warning("Refused second factor for locked user %s", user_id)
                return VerifyResult(channel=None, status=VerifyStatus.ATTEMPTS_EXCEEDED)

            channel, related = None, []
            if state.default_method is MethodKind.AUTHENTICATOR:
                credential = self.totp_credentials.get_for_user(user_id)
                step = self._accept_totp(credential, code, now)
                if step is not None:
                    credential.last_used_step = step
                    channel, related = Channel.AUTHENTICATOR, [(self.totp_credentials, credential)]
            verified = channel is not None or self.backup_vault.redeem(user_id, code)

            if verified:
                if state.failed_attempts or state.locked_until is not None:
                    state.failed_attempts = 0
                    state.locked_until = None
                    self.accounts.save(state, related=related)
                else:
                    for repository, instance in related:
                        repository.save(instance)
                return VerifyResult(channel=channel, status=VerifyStatus.VERIFIED)

            state.failed_attempts += 1
            if state.failed_attempts < self.policy.max_verify_attempts:
                self.accounts.save(state)
                return VerifyResult(channel=None, status=VerifyStatus.INVALID_CODE)

            state.failed_attempts = 0
            state.locked_until = now + timedelta(seconds=self.policy.second_factor_lockout)
            self.accounts.save(state)
        logger.warning("Locked second factor of user %s until %s", user_id, state.locked_until.isoformat())
        return VerifyResult(channel=None, status=VerifyStatus.ATTEMPTS_EXCEEDED)

    # Resend and cancel

    def resend(self, user_id: str, channel: Channel) -> ResendResult:
        """
        Send a fresh code for the pending setup of ``channel``.

        Raises:
            DeliveryError: the gateway refused the code; the pending setup is dropped.
        """
        channel = Channel(channel)
        if channel is Channel.AUTHENTICATOR:
            return ResendResult(channel=channel, status=ResendStatus.UNSUPPORTED)
        with self._channel_locks.get(user_id, channel):
            store = self._store_for(channel)
            session = store.get_user_session(user_id)
            outcome = store.resend_code(session.session_id) if session is not None else None
            if outcome is None:
                return ResendResult(channel=channel, status=ResendStatus.NO_PENDING_SETUP)
            if isinstance(outcome, ResendDenied):
                return ResendResult(channel=channel, status=ResendStatus.COOLDOWN, retry_after=outcome.retry_after)
            self._deliver(store, outcome)
            return ResendResult(channel=channel, status=ResendStatus.SENT, expires_at=outcome.expires_at)

    def handle_cancel_setup(self, user_id: str, channel: Channel) -> bool:
        """
        Drop the pending setup of ``channel``. Returns True if one existed.
        An enabled method stays enabled.
        """
        channel = Channel(channel)
        with self._channel_locks.get(user_id, channel):
            if channel is not Channel.AUTHENTICATOR:
                return self._store_for(channel).invalidate(user_id)
            credential = self.totp_credentials.get_for_user(user_id)
            if credential is None or not credential.has_pending_secret:
                return False
            credential.pending_secret = None
            credential.pending_created_at = None
            self.totp_credentials.save(credential)
            return True

    # Disable

    def _revoke_other_sessions(self, user_id: str, current_session_id: Optional[str]) -> List[str]:
        if not self.policy.revoke_sessions_on_disable or self.device_registry is None:
            return []
        return self.device_registry.revoke_all(user_id, except_session_id=current_session_id).revoked_ids

    def disable(self, user_id: str, channel: Channel, current_session_id: Optional[str] = None) -> DisableResult:
        """
        Disable one method. Disabling a method that is not enabled changes nothing.
        """
        channel = Channel(channel)
        with self._channel_locks.get(user_id, channel), self._account_locks.get(user_id):
            state = self._load_state(user_id)
            if not state.is_method_enabled(channel):
                return DisableResult(status=DisableStatus.ALREADY_DISABLED)

            state.methods[channel] = MethodState()
            if state.default_method is MethodKind.for_channel(channel):
                state.default_method = MethodKind.NONE
            state.enabled = bool(state.enabled_channels)
            related = []
            if channel is Channel.AUTHENTICATOR:
                related = self._erase_totp(self.totp_credentials.get_for_user(user_id))
            if not state.enabled:
                related.extend(self.backup_vault.revocations(user_id))
            self.accounts.save(state, related=related)
            if channel in self.stores:
                self.stores[channel].invalidate(user_id)
        logger.info("Disabled %s for user %s", channel, user_id)

        return DisableResult(status=DisableStatus.DISABLED, channels=[channel],
                             revoked_sessions=self._revoke_other_sessions(user_id, current_session_id))

    def disable_all(self, user_id: str, current_session_id: Optional[str] = None) -> DisableResult:
        """
        Disable every method in one commit.
        """
        with ExitStack() as stack:
            for channel in Channel:
                stack.enter_context(self._channel_locks.get(user_id, channel))
            stack.enter_context(self._account_locks.get(user_id))

            state = self._load_state(user_id)
            disabled = state.enabled_channels
            credential = self.totp_credentials.get_for_user(user_id)
            pending_sessions = [store for store in self.stores.values() if store.get_user_session(user_id)]
            if not disabled and not state.enabled and state.default_method is MethodKind.NONE \
                    and credential is None and not pending_sessions:
                return DisableResult(status=DisableStatus.ALREADY_DISABLED)

            for channel in Channel:
                state.methods[channel] = MethodState()
            state.default_method = MethodKind.NONE
            state.enabled = False
            related = self._erase_totp(credential) + self.backup_vault.revocations(user_id)
            self.accounts.save(state, related=related)
            for store in pending_sessions:
                store.invalidate(user_id)
        logger.info("Disabled all 2FA methods for user %s (%s)", user_id,
                    ', '.join(str(channel) for channel in disabled) or 'none enabled')

        return DisableResult(status=DisableStatus.DISABLED, channels=disabled,
                             revoked_sessions=self._revoke_other_sessions(user_id, current_session_id))
