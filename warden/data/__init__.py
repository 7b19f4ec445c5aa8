"""data module"""

from .base import DbAdapter
from .memory import MemoryAdapter
