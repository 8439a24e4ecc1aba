from __future__ import annotations

import secrets
from typing import Protocol


class RandomSource(Protocol):
    def next_below(self, bound: int) -> int:
        ...


class SecureRandomSource:
    """Draws one unsigned 32-bit value from the OS CSPRNG and reduces it modulo ``bound``.

    The modulo reduction is slightly biased when ``bound`` does not divide 2**32.
    That bias is accepted; there is no rejection sampling.
    """

    def next_below(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError("bound must be a positive integer")
        value = int.from_bytes(secrets.token_bytes(4), "big")
        return value % bound
