"""
Config class that reads the environment, and/or a .env file.
"""
import os
import logging
from abc import abstractmethod
from dataclasses import fields
from typing import Optional

from dotenv import load_dotenv

from warden.policy import TwoFactorPolicy

logger = logging.getLogger(__name__)


class BaseConfig():
    """
    Config class that reads the environment, and/or a .env file.
    """
    def __init__(self):
        load_dotenv()
        # Get all environment variables and store them in a dictionary
        self.env_vars = {key: os.getenv(key) for key in os.environ}

    def get_env_vars(self) -> dict:
        """
        Return the dictionary containing all environment variables
        """
        return self.env_vars

    def get_env_var(self, var_name: str, default: Optional[str] = None):
        """
        Retrieve the value of the specified environment variable
        Args:
            var_name (str) : Name of the env var to fetch
            default : Value returned when the variable is not set
        """
        if var_name in self.env_vars.keys():
            return self.env_vars[var_name]
        if default is None:
            logger.warning("Variable %s not found.", var_name)
        return default

    def get_var_as_int(self, var_name: str, default: int) -> int:
        """
        Returns a var as int, falling back to ``default`` when missing or malformed
        """
        value = self.env_vars.get(var_name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.error("Error: Invalid integer for %s: %r. Using %s.", var_name, value, default)
            return default

    def get_var_as_bool(self, var_name: str, default: bool) -> bool:
        """
        Returns a var as bool. Accepts 1/0, true/false, yes/no, on/off.
        """
        value = self.env_vars.get(var_name)
        if value is None:
            return default
        lowered = value.strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off'):
            return False
        logger.error("Error: Invalid boolean for %s: %r. Using %s.", var_name, value, default)
        return default

    @abstractmethod
    def validate_env_vars(self):
        """
        Abstract method for validation of the env vars.
        """


class TwoFactorConfig(BaseConfig):
    """
    Reads ``WARDEN_<FIELD>`` variables into a ``TwoFactorPolicy``.

    ``WARDEN_OTP_TTL=600`` overrides ``TwoFactorPolicy.otp_ttl`` and so on.
    Unset variables keep the policy defaults.
    """
    PREFIX = 'WARDEN_'

    def get_policy(self) -> TwoFactorPolicy:
        defaults = TwoFactorPolicy()
        overrides = {}
        for f in fields(TwoFactorPolicy):
            var_name = f"{self.PREFIX}{f.name.upper()}"
            default = getattr(defaults, f.name)
            if var_name not in self.env_vars:
                continue
            if isinstance(default, bool):
                overrides[f.name] = self.get_var_as_bool(var_name, default)
            elif isinstance(default, int):
                overrides[f.name] = self.get_var_as_int(var_name, default)
            else:
                overrides[f.name] = self.get_env_var(var_name, default)
        policy = TwoFactorPolicy(**overrides)
        self._validate_policy(policy)
        return policy

    @staticmethod
    def _validate_policy(policy: TwoFactorPolicy):
        if policy.otp_length < 4:
            raise ValueError("WARDEN_OTP_LENGTH must be at least 4")
        if policy.backup_code_length < 6:
            raise ValueError("WARDEN_BACKUP_CODE_LENGTH must be at least 6")
        if not 0 < policy.risk_medium_threshold < policy.risk_high_threshold <= 100:
            raise ValueError("Risk thresholds must satisfy 0 < medium < high <= 100")
        if policy.otp_ttl <= 0 or policy.resend_cooldown <= 0:
            raise ValueError("WARDEN_OTP_TTL and WARDEN_RESEND_COOLDOWN must be positive")
        if policy.token_secret_key == TwoFactorPolicy.token_secret_key:
            logger.warning("WARDEN_TOKEN_SECRET_KEY is not set; using the insecure default.")

    def validate_env_vars(self):
        self.get_policy()
