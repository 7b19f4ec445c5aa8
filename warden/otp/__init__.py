from .backends import MemorySessionBackend, SessionBackend
from .codes import codes_match, generate_numeric_code
from .session_store import CodeCheck, VerificationSessionStore
