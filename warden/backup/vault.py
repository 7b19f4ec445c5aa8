"""
Backup (recovery) code batches.
"""
import logging
import threading
from datetime import datetime
from typing import Callable, List, Tuple

from warden.models.backup_code import BackupCode
from warden.models.versioned_model import default_datetime, get_uuid_hex
from warden.otp.codes import codes_match, generate_numeric_code, is_well_formed
from warden.policy import TwoFactorPolicy
from warden.repositories.two_factor_repositories import BackupCodeRepository
from warden.results import BackupCodeInfo

logger = logging.getLogger(__name__)


class BackupCodeVault:
    """
    Generates, lists and redeems single-use recovery codes.

    Each ``generate`` replaces the previous batch in one transaction, so old
    codes stop working the moment the new batch exists.
    """

    def __init__(
        self,
        repository: BackupCodeRepository,
        policy: TwoFactorPolicy = None,
        clock: Callable[[], datetime] = default_datetime
    ):
        self.repository = repository
        self.policy = policy or TwoFactorPolicy()
        self.clock = clock
        self._lock = threading.Lock()

    def _all_codes(self, user_id: str) -> List[BackupCode]:
        return self.repository.get_many({'user_id': user_id}, limit=None)

    def generate(self, user_id: str) -> List[str]:
        with self._lock:
            now = self.clock()
            batch_id = get_uuid_hex()
            previous = self._all_codes(user_id)
            previous_codes = {code.code for code in previous}

            codes = []
            while len(codes) < self.policy.backup_code_count:
                code = generate_numeric_code(self.policy.backup_code_length)
                if code not in previous_codes and code not in codes:
                    codes.append(code)

            for old in previous:
                old.active = False
            new = [
                BackupCode(user_id=user_id, batch_id=batch_id, code=code, created_at=now)
                for code in codes
            ]
            self.repository.save_many(previous + new)
        logger.info("Generated %d backup codes for user %s (replaced %d)", len(new), user_id, len(previous))
        return codes

    def list(self, user_id: str) -> List[BackupCodeInfo]:
        """Unconsumed codes of the current batch. Empty means no recovery codes are configured."""
        return [
            BackupCodeInfo(code=code.code, created_at=code.created_at)
            for code in self.repository.get_unconsumed(user_id, limit=None)
        ]

    def remaining(self, user_id: str) -> int:
        return self.repository.get_count({'user_id': user_id, 'consumed': False})

    def redeem(self, user_id: str, submitted: str) -> bool:
        """
        Consume a backup code. A code can be redeemed once.
        """
        if isinstance(submitted, str):
            submitted = submitted.replace('-', '').replace(' ', '')
        if not is_well_formed(submitted, self.policy.backup_code_length):
            return False

        with self._lock:
            match = None
            for candidate in self.repository.get_unconsumed(user_id, limit=None):
                if codes_match(candidate.code, submitted) and match is None:
                    match = candidate
            if match is None:
                logger.info("Rejected backup code for user %s", user_id)
                return False

            match.consumed = True
            match.consumed_at = self.clock()
            self.repository.save(match)
        logger.info("Redeemed backup code for user %s", user_id)
        return True

    def revocations(self, user_id: str) -> List[Tuple[BackupCodeRepository, BackupCode]]:
        """
        Every live code of the user marked inactive, as ``(repository, code)``
        pairs for the caller to save alongside its own write.
        """
        codes = self._all_codes(user_id)
        for code in codes:
            code.active = False
        return [(self.repository, code) for code in codes]

    def revoke_all(self, user_id: str) -> int:
        """Invalidates every code of the user."""
        with self._lock:
            codes = [code for _, code in self.revocations(user_id)]
            if codes:
                self.repository.save_many(codes)
        return len(codes)
