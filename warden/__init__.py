"""
warden: two-factor enrollment, verification and device session trust.
"""
from .coordinator import IdentityProvider, TwoFactorCoordinator
from .exceptions import (
    DeliveryError,
    InvalidIdentity,
    MissingIdentity,
    RetryableError,
    StorageUnavailable,
    UnsupportedChannel,
    WardenError,
)
from .models import Channel, ChannelState, MethodKind, RiskLevel, SessionStatus, TwoFactorAccountState
from .policy import TwoFactorPolicy
from .results import (
    DisableResult,
    DisableStatus,
    ResendResult,
    ResendStatus,
    RevokeResult,
    RevokeStatus,
    SessionPage,
    SetupResult,
    SetupStatus,
    VerifyResult,
    VerifyStatus,
)

__all__ = [
    'IdentityProvider',
    'TwoFactorCoordinator',
    'DeliveryError',
    'InvalidIdentity',
    'MissingIdentity',
    'RetryableError',
    'StorageUnavailable',
    'UnsupportedChannel',
    'WardenError',
    'Channel',
    'ChannelState',
    'MethodKind',
    'RiskLevel',
    'SessionStatus',
    'TwoFactorAccountState',
    'TwoFactorPolicy',
    'DisableResult',
    'DisableStatus',
    'ResendResult',
    'ResendStatus',
    'RevokeResult',
    'RevokeStatus',
    'SessionPage',
    'SetupResult',
    'SetupStatus',
    'VerifyResult',
    'VerifyStatus',
]
