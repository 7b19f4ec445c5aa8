"""
BackupCode model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .versioned_model import VersionedModel


@dataclass(repr=False)
class BackupCode(VersionedModel):
    """A single-use recovery code."""

    user_id: Optional[str] = None
    batch_id: Optional[str] = None
    code: Optional[str] = field(default=None, metadata={'sensitive': True})
    created_at: Optional[datetime] = None
    consumed: bool = False
    consumed_at: Optional[datetime] = None

    def validate_code(self):
        if not self.code or not self.code.isdigit():
            return "Backup code must be a non-empty string of digits."
        return None
