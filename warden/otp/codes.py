"""
Numeric one-time code helpers.
"""
import hmac
import secrets


def generate_numeric_code(length: int) -> str:
    """Return a uniformly random, zero-padded code of ``length`` digits."""
    if length < 1:
        raise ValueError("Code length must be positive")
    return f"{secrets.randbelow(10 ** length):0{length}d}"


def is_well_formed(code, length: int) -> bool:
    return isinstance(code, str) and len(code) == length and code.isascii() and code.isdigit()


def codes_match(expected: str, submitted: str) -> bool:
    """Constant-time comparison of two codes."""
    if not isinstance(submitted, str) or not isinstance(expected, str):
        return False
    return hmac.compare_digest(expected.encode('utf-8'), submitted.encode('utf-8'))
