"""Tests for :mod:`identity.otp`."""

from collections import Counter
from unittest import TestCase, mock

from .. import otp
from ..exceptions import EntropyError

DRAWS = 100_000


def _leading_digit_probability(digit: int) -> float:
    """Chance that a code starts with ``digit``, bias included."""
    space = 2 ** 24
    cutoff = space % otp.CODE_SPACE     # 777,216
    block = otp.CODE_SPACE // 10
    low, high = digit * block, (digit + 1) * block
    heavy = max(0, min(high, cutoff) - low)
    light = block - heavy
    return (heavy * (space // otp.CODE_SPACE + 1)
            + light * (space // otp.CODE_SPACE)) / space


class TestGenerate(TestCase):
    """Codes are six decimal digits."""

    def test_format(self):
        """Every code is exactly six ASCII digits."""
        for _ in range(1000):
            code = otp.generate()
            self.assertEqual(len(code), 6)
            self.assertTrue(code.isdigit())
            self.assertTrue(code.isascii())

    def test_zero_padded(self):
        """Small values keep their leading zeros."""
        with mock.patch(f'{otp.__name__}.secrets') as mock_secrets:
            mock_secrets.token_bytes.return_value = (42).to_bytes(3, 'big')
            self.assertEqual(otp.generate(), '000042')

    def test_reduced_modulo(self):
        """Values past 999,999 wrap around."""
        with mock.patch(f'{otp.__name__}.secrets') as mock_secrets:
            mock_secrets.token_bytes.return_value = b'\xff\xff\xff'
            self.assertEqual(otp.generate(), '777215')

    def test_entropy_failure(self):
        """The random source is unavailable."""
        with mock.patch(f'{otp.__name__}.secrets') as mock_secrets:
            mock_secrets.token_bytes.side_effect = OSError('no entropy')
            with self.assertRaises(EntropyError):
                otp.generate()


class TestDistribution(TestCase):
    """Leading digits follow the known, slightly biased distribution."""

    @classmethod
    def setUpClass(cls):
        cls.counts = Counter(otp.generate()[0] for _ in range(DRAWS))

    def test_expected_probabilities(self):
        """The biased probabilities add up."""
        self.assertAlmostEqual(
            sum(_leading_digit_probability(d) for d in range(10)), 1.0
        )
        self.assertAlmostEqual(_leading_digit_probability(0), 0.10133, 4)
        self.assertAlmostEqual(_leading_digit_probability(9), 0.09537, 4)

    def test_leading_digits(self):
        """Observed frequencies are close to the expected ones."""
        for digit in range(10):
            observed = self.counts[str(digit)] / DRAWS
            expected = _leading_digit_probability(digit)
            self.assertAlmostEqual(observed, expected, delta=0.006,
                                   msg=f'leading digit {digit}')

    def test_low_digits_more_likely(self):
        """Codes below 777,216 come up more often than those above."""
        low = sum(self.counts[str(d)] for d in range(7)) / 7
        high = sum(self.counts[str(d)] for d in (8, 9)) / 2
        self.assertGreater(low, high)
