from typing import List, Optional

from warden.data.base import DbAdapter
from warden.models import BackupCode, DeviceSession, TotpCredential, TwoFactorAccountState
from warden.repositories.base_repository import BaseRepository


class AccountStateRepository(BaseRepository):
    def __init__(self, adapter: DbAdapter, user_id: Optional[str] = None):
        super().__init__(adapter, TwoFactorAccountState, user_id)

    def get_for_user(self, user_id: str) -> Optional[TwoFactorAccountState]:
        return self.get_one({'user_id': user_id})


class TotpCredentialRepository(BaseRepository):
    def __init__(self, adapter: DbAdapter, user_id: Optional[str] = None):
        super().__init__(adapter, TotpCredential, user_id)

    def get_for_user(self, user_id: str) -> Optional[TotpCredential]:
        return self.get_one({'user_id': user_id})


class BackupCodeRepository(BaseRepository):
    def __init__(self, adapter: DbAdapter, user_id: Optional[str] = None):
        super().__init__(adapter, BackupCode, user_id)

    def get_unconsumed(self, user_id: str, limit: int = 100) -> List[BackupCode]:
        return self.get_many({'user_id': user_id, 'consumed': False},
                             sort=[('created_at', 'ASC'), ('code', 'ASC')], limit=limit)


class DeviceSessionRepository(BaseRepository):
    def __init__(self, adapter: DbAdapter, user_id: Optional[str] = None):
        super().__init__(adapter, DeviceSession, user_id)

    def get_for_user(self, user_id: str, include_revoked: bool = False,
                     limit: int = 100, offset: int = 0) -> List[DeviceSession]:
        conditions = {'user_id': user_id}
        if not include_revoked:
            conditions['revoked'] = False
        return self.get_many(conditions, sort=[('last_seen_at', 'DESC')], limit=limit, offset=offset)

    def count_for_user(self, user_id: str, include_revoked: bool = False) -> int:
        conditions = {'user_id': user_id}
        if not include_revoked:
            conditions['revoked'] = False
        return self.get_count(conditions)
