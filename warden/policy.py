"""
Tunable limits of the two-factor core.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class TwoFactorPolicy:
    """Policy constants. Durations are in seconds."""

    app_name: str = 'Warden'

    otp_length: int = 6
    otp_ttl: int = 300
    otp_grace_period: int = 600
    max_verify_attempts: int = 5
    resend_cooldown: int = 60
    resend_cooldown_max: int = 300

    totp_issuer: str = 'Warden'
    totp_digits: int = 6
    totp_interval: int = 30
    totp_valid_window: int = 1

    backup_code_count: int = 10
    backup_code_length: int = 8

    risk_medium_threshold: int = 34
    risk_high_threshold: int = 67
    online_window: int = 300
    idle_window: int = 1800
    device_session_ttl: int = 14 * 24 * 3600
    sessions_page_size: int = 20

    second_factor_lockout: int = 300

    revoke_sessions_on_disable: bool = False
    token_secret_key: str = 'change-me'

    def resend_cooldown_for(self, resend_count: int) -> int:
        """Cooldown after the ``resend_count``-th resend; doubles each time up to the cap."""
        return min(self.resend_cooldown * (2 ** resend_count), self.resend_cooldown_max)
