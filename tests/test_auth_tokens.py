"""
Tests for device session token generation and validation.

This module tests the security-critical signed tokens handed to devices
when a session is opened.
"""
import hashlib
import hmac
import unittest
from unittest.mock import patch

from warden.auth.tokens import generate_session_token, validate_session_token


# Test constants
TEST_SESSION_ID = "0f8e6c1d2b3a49f5a6b7c8d9e0f1a2b3"
TEST_SECRET_KEY = "test_secret_key_123"
TEST_TIMESTAMP = 1640000000
TEST_EXPIRATION = 3600  # 1 hour


class TestGenerateSessionToken(unittest.TestCase):
    """Test session token generation."""

    @patch('warden.auth.tokens.time.time', return_value=TEST_TIMESTAMP)
    def test_generate_session_token_format(self, mock_time):
        """
        Test successful session token generation.

        Verifies that the token is generated with correct format:
        session_id:timestamp:signature, and the expiry timestamp
        """
        token, expiry = generate_session_token(TEST_SESSION_ID, TEST_SECRET_KEY, TEST_EXPIRATION)

        parts = token.split(':')
        self.assertEqual(len(parts), 3)
        self.assertEqual(parts[0], TEST_SESSION_ID)
        self.assertEqual(parts[1], str(TEST_TIMESTAMP))
        self.assertEqual(expiry, TEST_TIMESTAMP + TEST_EXPIRATION)

        expected = hmac.new(TEST_SECRET_KEY.encode(), (TEST_SESSION_ID + str(TEST_TIMESTAMP)).encode(),
                            hashlib.sha256).hexdigest()
        self.assertEqual(parts[2], expected)


class TestValidateSessionToken(unittest.TestCase):
    """Test session token validation."""

    @patch('warden.auth.tokens.time.time', return_value=TEST_TIMESTAMP)
    def test_round_trip(self, mock_time):
        token, _ = generate_session_token(TEST_SESSION_ID, TEST_SECRET_KEY, TEST_EXPIRATION)
        self.assertEqual(validate_session_token(token, TEST_SECRET_KEY), TEST_SESSION_ID)
        self.assertEqual(validate_session_token(token, TEST_SECRET_KEY, TEST_EXPIRATION), TEST_SESSION_ID)

    @patch('warden.auth.tokens.time.time', return_value=TEST_TIMESTAMP)
    def test_wrong_key_or_tampering(self, mock_time):
        """
        Test that signatures bind the session id, timestamp and key.
        """
        token, _ = generate_session_token(TEST_SESSION_ID, TEST_SECRET_KEY, TEST_EXPIRATION)
        session_id, timestamp, signature = token.split(':')

        self.assertFalse(validate_session_token(token, "other_key"))
        self.assertFalse(validate_session_token(f"other:{timestamp}:{signature}", TEST_SECRET_KEY))
        self.assertFalse(validate_session_token(f"{session_id}:{int(timestamp) + 1}:{signature}", TEST_SECRET_KEY))

    def test_expired_token(self):
        with patch('warden.auth.tokens.time.time', return_value=TEST_TIMESTAMP):
            token, _ = generate_session_token(TEST_SESSION_ID, TEST_SECRET_KEY, TEST_EXPIRATION)
        with patch('warden.auth.tokens.time.time', return_value=TEST_TIMESTAMP + TEST_EXPIRATION + 1):
            self.assertFalse(validate_session_token(token, TEST_SECRET_KEY, TEST_EXPIRATION))
            self.assertEqual(validate_session_token(token, TEST_SECRET_KEY), TEST_SESSION_ID)

    def test_malformed_tokens(self):
        for token in ("", "no-colons", "a:b", "a:notanumber:c", "a:1:b:c", None):
            self.assertFalse(validate_session_token(token, TEST_SECRET_KEY))
