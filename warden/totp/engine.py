"""
RFC 6238 time-based one-time passwords for authenticator apps.

The engine is stateless: callers persist the secret and decide when a
pending secret becomes trusted.
"""
import binascii
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import pyotp
from pyotp.utils import strings_equal

from warden.models.versioned_model import default_datetime
from warden.otp.codes import is_well_formed

logger = logging.getLogger(__name__)

SECRET_LENGTH = 32  # base32 characters, 160 bits


@dataclass(frozen=True)
class TotpSecret:
    secret: str = field(repr=False)
    provisioning_uri: str = field(repr=False)
    manual_key: str = field(repr=False)


class TotpEngine:
    """
    Generates and checks authenticator codes.

    Args:
        issuer: Application name shown in the authenticator app.
        digits: Number of digits in a code.
        interval: Length of a time step in seconds.
        valid_window: Steps accepted on either side of the current one.
    """

    def __init__(self, issuer: str = 'Warden', digits: int = 6, interval: int = 30, valid_window: int = 1):
        self.issuer = issuer
        self.digits = digits
        self.interval = interval
        self.valid_window = valid_window

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval, issuer=self.issuer)

    def generate_secret(self, account_label: str, issuer: Optional[str] = None) -> TotpSecret:
        """
        Create a random secret and its provisioning URI. Nothing is persisted.
        """
        secret = pyotp.random_base32(length=SECRET_LENGTH)
        return TotpSecret(
            secret=secret,
            provisioning_uri=self.provisioning_uri(secret, account_label, issuer),
            manual_key=self.format_secret(secret),
        )

    def provisioning_uri(self, secret: str, account_label: str, issuer: Optional[str] = None) -> str:
        """The ``otpauth://`` URI to encode in a QR code. Deterministic for a given secret."""
        return pyotp.TOTP(secret, digits=self.digits, interval=self.interval).provisioning_uri(
            name=account_label,
            issuer_name=issuer or self.issuer,
        )

    @staticmethod
    def format_secret(secret: str) -> str:
        """Groups of four characters for manual entry."""
        return ' '.join(secret[i:i + 4] for i in range(0, len(secret), 4))

    def current_code(self, secret: str, now: Optional[datetime] = None) -> str:
        return self._totp(secret).at(now or default_datetime())

    def seconds_remaining(self, now: Optional[datetime] = None) -> int:
        """Seconds until the current code rolls over."""
        timestamp = int((now or default_datetime()).timestamp())
        return self.interval - timestamp % self.interval

    def verify(self, secret: str, submitted_code: str, now: Optional[datetime] = None) -> bool:
        """
        Accept a code from the current time step or the ``valid_window`` steps around it.

        Returns False for anything malformed instead of raising.
        """
        return self.match_step(secret, submitted_code, now) is not None

    def match_step(self, secret: str, submitted_code: str, now: Optional[datetime] = None) -> Optional[int]:
        """
        The time step ``submitted_code`` belongs to, or None if it matches no step in the window.

        Callers that must refuse a code twice store the returned step and
        reject codes at or before it.
        """
        if isinstance(submitted_code, str):
            submitted_code = submitted_code.strip()
        if not secret or not is_well_formed(submitted_code, self.digits):
            return None
        now = now or default_datetime()
        try:
            totp = self._totp(secret)
            current = totp.timecode(now)
            for offset in range(-self.valid_window, self.valid_window + 1):
                if strings_equal(submitted_code, totp.at(now, counter_offset=offset)):
                    return current + offset
        except (binascii.Error, ValueError, TypeError):
            logger.error("Stored TOTP secret could not be decoded")
        return None
