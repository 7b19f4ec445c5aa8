"""
Tests for numeric one-time code helpers.
"""
import unittest
from unittest.mock import patch

from warden.otp.codes import codes_match, generate_numeric_code, is_well_formed


class TestGenerateNumericCode(unittest.TestCase):

    def test_codes_have_fixed_width(self):
        for length in (6, 8):
            code = generate_numeric_code(length)
            self.assertEqual(len(code), length)
            self.assertTrue(code.isdigit())

    @patch('warden.otp.codes.secrets.randbelow', return_value=42)
    def test_codes_are_zero_padded(self, mock_randbelow):
        """
        Test that small values keep their leading zeros.
        """
        self.assertEqual(generate_numeric_code(6), "000042")
        mock_randbelow.assert_called_once_with(10 ** 6)

    def test_invalid_length(self):
        with self.assertRaises(ValueError):
            generate_numeric_code(0)


class TestCodeComparison(unittest.TestCase):

    def test_is_well_formed(self):
        self.assertTrue(is_well_formed("012345", 6))
        self.assertFalse(is_well_formed("12345", 6))
        self.assertFalse(is_well_formed("12345a", 6))
        self.assertFalse(is_well_formed("１２３４５６", 6))
        self.assertFalse(is_well_formed(123456, 6))

    @patch('warden.otp.codes.hmac.compare_digest', return_value=True)
    def test_codes_match_uses_constant_time_compare(self, mock_compare):
        self.assertTrue(codes_match("123456", "123456"))
        mock_compare.assert_called_once_with(b"123456", b"123456")

    def test_codes_match(self):
        self.assertTrue(codes_match("123456", "123456"))
        self.assertFalse(codes_match("123456", "123457"))
        self.assertFalse(codes_match("123456", None))
