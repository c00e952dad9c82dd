"""Password strength scoring.

``score`` maps a secret to an integer in ``[0, 100]``. Five criteria are
weighted independently so that satisfying an extra character class at a
fixed length can only raise the score:

* minimum length (8 characters)  20
* lowercase letter               15
* uppercase letter               15
* digit                          15
* symbol                         15
* length bonus, 2 per character beyond 8, capped at 20

``WEAK_MAX`` and ``STRONG_MIN`` are the classification thresholds used for
vault statistics and alert derivation.
"""
from typing import Iterable

from patterns.chain_of_responsibility import check_admission

WEAK_MAX = 39
STRONG_MIN = 70

MIN_LENGTH = 8
LENGTH_WEIGHT = 20
CLASS_WEIGHT = 15
BONUS_PER_CHAR = 2
BONUS_CAP = 20

WEAK = 'weak'
MEDIUM = 'medium'
STRONG = 'strong'


def _char_classes(secret: str):
    return (
        any(c.islower() for c in secret),
        any(c.isupper() for c in secret),
        any(c.isdigit() for c in secret),
        any(not c.isalnum() and not c.isspace() for c in secret),
    )


def score(secret) -> int:
    if not isinstance(secret, str) or not secret:
        return 0

    total = 0
    if len(secret) >= MIN_LENGTH:
        total += LENGTH_WEIGHT
    total += CLASS_WEIGHT * sum(_char_classes(secret))
    total += min(BONUS_CAP, max(0, len(secret) - MIN_LENGTH) * BONUS_PER_CHAR)
    return max(0, min(100, total))


def classify(strength: int) -> str:
    if strength <= WEAK_MAX:
        return WEAK
    if strength >= STRONG_MIN:
        return STRONG
    return MEDIUM


def tally(strengths: Iterable[int]) -> dict:
    """Count strengths into total/weak/strong buckets. The middle band is in neither."""
    counts = {'total': 0, 'weak': 0, 'strong': 0}
    for s in strengths:
        counts['total'] += 1
        label = classify(s)
        if label != MEDIUM:
            counts[label] += 1
    return counts


def health_percentage(strong: int, total: int) -> int:
    return max(0, min(100, round(strong / max(1, total) * 100)))


def is_strong(secret) -> bool:
    return check_admission(secret)
