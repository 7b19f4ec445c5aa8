"""
Models for warden
"""

from .versioned_model import VersionedModel, ModelValidationError
from .enums import Channel, ChannelState, MethodKind, RiskLevel, SessionStatus
from .account_state import MethodState, TwoFactorAccountState
from .verification_session import ResendDenied, VerificationSession
from .totp_credential import TotpCredential
from .backup_code import BackupCode
from .device_session import DeviceSession, RISK_FLAGS
