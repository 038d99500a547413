"""Random token sequences with adjacent-repeat avoidance."""

from __future__ import annotations

import random
from typing import Dict, List, Optional

DIGITS = "0123456789"
# I and O are left out; they read too much like 1 and 0.
LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
HEX_DIGITS = "0123456789ABCDEF"

ALPHABETS: Dict[str, str] = {
    "digits": DIGITS,
    "letters": LETTERS,
    "hex": HEX_DIGITS,
    "mixed": DIGITS + LETTERS,
}

MAX_REDRAWS = 20


def alphabet_for(kind: str) -> str:
    try:
        return ALPHABETS[kind]
    except KeyError:
        raise ValueError(f"Unknown alphabet kind: {kind!r}") from None


def generate_sequence(
    length: int,
    alphabet: str,
    token_length: int = 1,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Return ``length`` tokens drawn uniformly from the ``alphabet`` kind.

    Each token concatenates ``token_length`` independent draws. A token equal
    to its predecessor is redrawn, up to ``MAX_REDRAWS`` attempts in total,
    after which the repeat is accepted.
    """
    if length < 1:
        raise ValueError(f"Sequence length must be positive, got {length}")
    if token_length < 1:
        raise ValueError(f"Token length must be positive, got {token_length}")

    pool = alphabet_for(alphabet)
    rng = rng or random.Random()

    def draw() -> str:
        return "".join(rng.choice(pool) for _ in range(token_length))

    sequence: List[str] = []
    last: Optional[str] = None
    for _ in range(length):
        token = draw()
        tries = 1
        while token == last and len(pool) > 1 and tries < MAX_REDRAWS:
            token = draw()
            tries += 1
        sequence.append(token)
        last = token
    return sequence
