from .vault import BackupCodeVault
