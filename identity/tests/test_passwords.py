"""Tests for :mod:`identity.passwords`."""

from unittest import TestCase, mock

from hypothesis import given, settings, strategies as st

from .. import passwords
from ..exceptions import HashingError, PasswordTooLong, MissingPasswordHash
from ..passwords import Credential

# Use the cheapest bcrypt cost in tests; hashing at 12 is slow on purpose.
FAST = 4

plaintexts = st.text(
    alphabet=st.characters(blacklist_characters='\x00'),
    min_size=1,
    max_size=18
)


class TestSetAndMatch(TestCase):
    """A credential matches the plaintext it was set from, and nothing else."""

    @settings(max_examples=20, deadline=None)
    @given(plaintexts)
    def test_matches(self, plaintext):
        """The hash matches the plaintext that produced it."""
        credential = Credential(cost=FAST).set(plaintext)
        self.assertTrue(credential.matches(plaintext))

    @settings(max_examples=20, deadline=None)
    @given(plaintexts, plaintexts)
    def test_does_not_match_other(self, plaintext, other):
        """The hash does not match a different plaintext."""
        if plaintext == other:
            return
        credential = Credential(cost=FAST).set(plaintext)
        self.assertFalse(credential.matches(other))

    def test_salted(self):
        """Two hashes of the same password differ."""
        one = Credential(cost=FAST).set('s3cr3tpassw0rd')
        two = Credential(cost=FAST).set('s3cr3tpassw0rd')
        self.assertNotEqual(one.hash, two.hash)
        self.assertNotEqual(one, two)
        self.assertTrue(two.matches('s3cr3tpassw0rd'))

    def test_default_cost(self):
        """Hashes are bcrypt with cost 12 unless told otherwise."""
        credential = Credential().set('s3cr3tpassw0rd')
        self.assertEqual(passwords.BCRYPT_COST, 12)
        self.assertTrue(credential.hash.startswith(b'$2b$12$'))

    def test_plaintext_not_in_hash(self):
        """The hash does not contain the plaintext."""
        credential = Credential(cost=FAST).set('s3cr3tpassw0rd')
        self.assertNotIn(b's3cr3tpassw0rd', credential.hash)
        self.assertNotIn('s3cr3tpassw0rd', repr(credential))

    def test_loaded_from_hash(self):
        """A credential built from a stored hash still matches."""
        hashed = Credential(cost=FAST).set('s3cr3tpassw0rd').hash
        credential = Credential(hashed)
        self.assertIsNone(credential.plaintext)
        self.assertTrue(credential.matches('s3cr3tpassw0rd'))
        self.assertFalse(credential.matches('s3cr3tpassw0rD'))


class TestLength(TestCase):
    """bcrypt only looks at 72 bytes, so longer passwords are refused."""

    def test_exactly_72_bytes(self):
        """72 bytes is fine."""
        plaintext = 'a' * 72
        credential = Credential(cost=FAST).set(plaintext)
        self.assertTrue(credential.matches(plaintext))

    def test_73_bytes(self):
        """73 bytes is too long."""
        with self.assertRaises(PasswordTooLong):
            Credential(cost=FAST).set('a' * 73)

    def test_multibyte_characters(self):
        """The limit is in bytes, not characters."""
        with self.assertRaises(PasswordTooLong):
            Credential(cost=FAST).set('é' * 37)   # 74 bytes.
        credential = Credential(cost=FAST).set('é' * 36)
        self.assertTrue(credential.matches('é' * 36))

    def test_long_candidate_never_matches(self):
        """A candidate that shares the first 72 bytes does not match."""
        plaintext = 'a' * 72
        credential = Credential(cost=FAST).set(plaintext)
        self.assertFalse(credential.matches(plaintext + 'b'))


class TestFailures(TestCase):
    """Hashing problems are reported as errors, not as mismatches."""

    def test_missing_hash(self):
        """There is nothing to compare with."""
        with self.assertRaises(MissingPasswordHash):
            Credential().matches('s3cr3tpassw0rd')

    def test_malformed_hash(self):
        """A stored hash that is not a bcrypt hash."""
        with self.assertRaises(HashingError):
            Credential(b'not-a-bcrypt-hash').matches('s3cr3tpassw0rd')

    @mock.patch(f'{passwords.__name__}.bcrypt')
    def test_salt_failure(self, mock_bcrypt):
        """The salt could not be generated."""
        mock_bcrypt.gensalt.side_effect = OSError('no entropy')
        with self.assertRaises(HashingError):
            Credential(cost=FAST).set('s3cr3tpassw0rd')
