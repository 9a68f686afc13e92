"""
One-time activation codes.

A code is three bytes from the OS CSPRNG read as a big-endian 24-bit integer,
reduced modulo 1,000,000 and zero-padded to six digits. 2**24 is not a
multiple of 10**6, so the reduction is slightly biased: values below 777,216
come up 17 times in 16,777,216 draws, the rest 16 times. That is a bias of
about 6% between the most and least likely codes, which is acceptable for a
short-lived, human-entered code.
"""

import secrets

from .exceptions import EntropyError

CODE_DIGITS = 6
CODE_SPACE = 10 ** CODE_DIGITS


def generate() -> str:
    """
    Generate a six-digit activation code.

    Raises
    ------
    :class:`.EntropyError`
        If the secure random source is unavailable.

    """
    try:
        raw = secrets.token_bytes(3)
    except (OSError, NotImplementedError) as e:
        raise EntropyError('cannot generate random bytes') from e
    return f'{int.from_bytes(raw, "big") % CODE_SPACE:0{CODE_DIGITS}d}'
