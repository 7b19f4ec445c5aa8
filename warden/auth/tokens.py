import hashlib
import hmac
import time
from typing import Optional, Tuple, Union


def _sign(secret_key: str, data: str, encoding: str) -> str:
    return hmac.new(
        key=secret_key.encode(encoding),
        msg=data.encode(encoding),
        digestmod=hashlib.sha256
    ).hexdigest()


def generate_session_token(session_id, secret_key: str, expiration: int,
                           encoding: str = 'utf-8') -> Tuple[str, int]:
    """Create a signed token for a device session. Returns the token and its expiry timestamp."""
    timestamp = str(int(time.time()))
    data = str(session_id) + timestamp
    signature = _sign(secret_key, data, encoding)
    return f"{session_id}:{timestamp}:{signature}", int(timestamp) + expiration


def validate_session_token(token: str, secret_key: str, expiration: Optional[int] = None,
                           encoding: str = 'utf-8') -> Union[str, bool]:
    """Returns the session id of a valid token, False otherwise"""
    try:
        session_id, timestamp, signature = token.split(':')
        issued_at = int(timestamp)
    except (AttributeError, ValueError):
        return False
    if expiration is not None and issued_at + expiration < int(time.time()):
        return False
    expected_signature = _sign(secret_key, session_id + timestamp, encoding)
    if hmac.compare_digest(signature, expected_signature):
        return session_id
    return False
