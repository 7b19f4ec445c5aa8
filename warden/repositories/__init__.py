from .base_repository import BaseRepository
from .two_factor_repositories import (
    AccountStateRepository,
    BackupCodeRepository,
    DeviceSessionRepository,
    TotpCredentialRepository,
)
