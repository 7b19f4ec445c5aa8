"""
Tests for the backup code vault.
"""
import unittest

from warden.backup import BackupCodeVault
from warden.data import MemoryAdapter
from warden.policy import TwoFactorPolicy
from warden.repositories import BackupCodeRepository

from fakes import FakeClock

TEST_USER = "user-1"


class TestBackupCodeVault(unittest.TestCase):

    def setUp(self):
        self.clock = FakeClock()
        self.repository = BackupCodeRepository(MemoryAdapter())
        self.vault = BackupCodeVault(self.repository, TwoFactorPolicy(), self.clock)

    def test_generate_returns_ten_unique_codes(self):
        """
        Test that a batch holds ten distinct 8-digit codes.
        """
        codes = self.vault.generate(TEST_USER)

        self.assertEqual(len(codes), 10)
        self.assertEqual(len(set(codes)), 10)
        for code in codes:
            self.assertEqual(len(code), 8)
            self.assertTrue(code.isdigit())

    def test_list_without_batch_is_empty(self):
        self.assertEqual(self.vault.list(TEST_USER), [])
        self.assertEqual(self.vault.remaining(TEST_USER), 0)

    def test_list_returns_current_batch(self):
        codes = self.vault.generate(TEST_USER)

        listed = self.vault.list(TEST_USER)

        self.assertEqual(sorted(info.code for info in listed), sorted(codes))
        self.assertTrue(all(info.created_at == self.clock() for info in listed))

    def test_new_batch_replaces_previous(self):
        """
        Test that regenerating yields a disjoint batch and kills the old one.

        Verifies:
        - No code is shared between the two batches
        - Old codes no longer redeem
        - Only the new batch is listed
        """
        first = self.vault.generate(TEST_USER)
        second = self.vault.generate(TEST_USER)

        self.assertFalse(set(first) & set(second))
        self.assertEqual(sorted(info.code for info in self.vault.list(TEST_USER)), sorted(second))
        for code in first:
            self.assertFalse(self.vault.redeem(TEST_USER, code))
        self.assertEqual(self.vault.remaining(TEST_USER), 10)

    def test_redeem_is_single_use(self):
        codes = self.vault.generate(TEST_USER)

        self.assertTrue(self.vault.redeem(TEST_USER, codes[0]))
        self.assertFalse(self.vault.redeem(TEST_USER, codes[0]))
        self.assertEqual(self.vault.remaining(TEST_USER), 9)
        self.assertNotIn(codes[0], [info.code for info in self.vault.list(TEST_USER)])

    def test_redeem_accepts_grouped_input(self):
        code = self.vault.generate(TEST_USER)[0]

        self.assertTrue(self.vault.redeem(TEST_USER, f"{code[:4]}-{code[4:]}"))

    def test_redeem_rejects_other_users_codes(self):
        code = self.vault.generate("user-2")[0]

        self.assertFalse(self.vault.redeem(TEST_USER, code))
        self.assertTrue(self.vault.redeem("user-2", code))

    def test_redeem_rejects_malformed_input(self):
        self.vault.generate(TEST_USER)
        for submitted in (None, "", "1234", "abcdefgh"):
            self.assertFalse(self.vault.redeem(TEST_USER, submitted))

    def test_revoke_all(self):
        codes = self.vault.generate(TEST_USER)

        self.assertEqual(self.vault.revoke_all(TEST_USER), 10)
        self.assertEqual(self.vault.list(TEST_USER), [])
        self.assertFalse(self.vault.redeem(TEST_USER, codes[0]))

    def test_revocations_are_left_for_the_caller_to_save(self):
        self.vault.generate(TEST_USER)

        pairs = self.vault.revocations(TEST_USER)

        self.assertEqual(len(pairs), 10)
        self.assertTrue(all(repository is self.vault.repository for repository, _ in pairs))
        self.assertFalse(any(code.active for _, code in pairs))
        self.assertEqual(self.vault.remaining(TEST_USER), 10)
