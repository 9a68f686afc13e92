"""Tests for :mod:`identity.tokens.sealed`."""

from unittest import TestCase
from datetime import datetime, timedelta
import secrets

import pyseto
from pyseto import Key
from pytz import UTC

from ...exceptions import InvalidToken, ExpiredToken, InvalidKeySize
from ..sealed import PasetoMaker


def _random_key(size: int = 32) -> str:
    return secrets.token_hex(size)[:size]


class TestPasetoMaker(TestCase):
    """PASETO tokens are encrypted with a 32-byte symmetric key."""

    def setUp(self):
        self.key = _random_key()
        self.maker = PasetoMaker(self.key)

    def test_create_and_verify(self):
        """A fresh token verifies and carries the subject and times."""
        duration = timedelta(minutes=1)
        issued_at = datetime.now(tz=UTC)
        token = self.maker.create_token('ann@example.com', duration)
        self.assertTrue(token.startswith('v4.local.'))

        payload = self.maker.verify_token(token)
        self.assertTrue(bool(payload.token_id))
        self.assertEqual(payload.subject, 'ann@example.com')
        self.assertLess(abs(payload.issued_at - issued_at),
                        timedelta(seconds=1))
        self.assertLess(abs(payload.expired_at - (issued_at + duration)),
                        timedelta(seconds=1))

    def test_token_ids_are_unique(self):
        """Each token gets its own random identifier."""
        one = self.maker.verify_token(
            self.maker.create_token('ann@example.com', timedelta(minutes=1))
        )
        two = self.maker.verify_token(
            self.maker.create_token('ann@example.com', timedelta(minutes=1))
        )
        self.assertNotEqual(one.token_id, two.token_id)

    def test_subject_is_not_readable(self):
        """The payload is encrypted, not just encoded."""
        token = self.maker.create_token('ann@example.com',
                                        timedelta(minutes=1))
        self.assertNotIn('ann@example.com', token)

    def test_expired(self):
        """A token created with a negative duration has already expired."""
        token = self.maker.create_token('ann@example.com',
                                        timedelta(minutes=-1))
        self.assertTrue(bool(token))
        with self.assertRaises(ExpiredToken):
            self.maker.verify_token(token)

    def test_other_key(self):
        """A token made with another key does not verify."""
        other = PasetoMaker(_random_key())
        token = other.create_token('ann@example.com', timedelta(minutes=1))
        with self.assertRaises(InvalidToken):
            self.maker.verify_token(token)

    def test_expired_token_with_other_key(self):
        """Authentication is checked before expiry."""
        other = PasetoMaker(_random_key())
        token = other.create_token('ann@example.com', timedelta(minutes=-1))
        with self.assertRaises(InvalidToken):
            self.maker.verify_token(token)

    def test_tampered(self):
        """Changing any part of the ciphertext breaks authentication."""
        token = self.maker.create_token('ann@example.com',
                                        timedelta(minutes=1))
        index = len('v4.local.') + 10
        replacement = 'A' if token[index] != 'A' else 'B'
        tampered = token[:index] + replacement + token[index + 1:]
        with self.assertRaises(InvalidToken):
            self.maker.verify_token(tampered)

    def test_garbage(self):
        """Things that are not tokens at all are rejected."""
        for garbage in ['', 'foo', 'v4.local.', 'v4.local.!!!!',
                        'v2.local.AAAA', 'a.b.c', None, 42]:
            with self.assertRaises(InvalidToken):
                self.maker.verify_token(garbage)

    def test_unencodable(self):
        """Strings that cannot be UTF-8 encoded are not tokens either."""
        with self.assertRaises(InvalidToken):
            self.maker.verify_token('v4.local.\ud800')

    def test_claims_not_an_object(self):
        """An authentic token whose payload is not a claim set."""
        key = Key.new(version=4, purpose='local',
                      key=self.key.encode('utf-8'))
        for message in [b'[1, 2, 3]', b'not json', b'{"subject": 1}']:
            token = pyseto.encode(key, message).decode('ascii')
            with self.assertRaises(InvalidToken):
                self.maker.verify_token(token)

    def test_bad_timestamps(self):
        """An authentic token with unparseable timestamps is invalid."""
        key = Key.new(version=4, purpose='local',
                      key=self.key.encode('utf-8'))
        message = (b'{"token_id": "x", "subject": "ann@example.com", '
                   b'"issued_at": "yesterday", "expired_at": "tomorrow"}')
        token = pyseto.encode(key, message).decode('ascii')
        with self.assertRaises(InvalidToken):
            self.maker.verify_token(token)


class TestKeySize(TestCase):
    """The key must be exactly 32 bytes."""

    def test_short_key(self):
        """A 31-byte key is rejected."""
        with self.assertRaises(InvalidKeySize):
            PasetoMaker(_random_key(31))

    def test_long_key(self):
        """A 33-byte key is rejected."""
        with self.assertRaises(InvalidKeySize):
            PasetoMaker(_random_key(33))

    def test_bytes_key(self):
        """Raw bytes are accepted as well as strings."""
        maker = PasetoMaker(secrets.token_bytes(32))
        token = maker.create_token('ann@example.com', timedelta(minutes=1))
        self.assertEqual(maker.verify_token(token).subject, 'ann@example.com')
