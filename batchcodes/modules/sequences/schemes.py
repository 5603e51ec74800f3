"""Suffix numbering schemes for sequence counters.

A counter starts Numeric (``0001``..``9999``). Once that range is spent it is
promoted to one alphanumeric scheme, chosen by the overflow policy, and keeps
it for the rest of the period:

* AlphaSuffix: ``0001A``..``9999A``, ``0001B``, ... ``9999Z``
* AlphaPrefix: ``A0001``..``A9999``, ``B0001``, ... ``Z9999``

Every suffix maps to an ordinal (1-based position in allocation order), which
is what the allocator advances. Ordinals past ``MAX_ORDINAL`` do not exist;
asking for them raises ``SequenceExhausted`` instead of wrapping.
"""
import re
import string
from enum import Enum
from batchcodes.core.errors import SequenceExhausted

class SequenceType(str, Enum):
    NUMERIC = "numeric"
    ALPHA_SUFFIX = "alpha_suffix"
    ALPHA_PREFIX = "alpha_prefix"

NUMBER_WIDTH = 4
NUMBER_MAX = 9999
LETTERS = string.ascii_uppercase
MAX_ORDINAL = NUMBER_MAX * (1 + len(LETTERS))
SUFFIX_MAX_LENGTH = NUMBER_WIDTH + 1

_NUMERIC_RE = re.compile(r"^([0-9]{4})$")
_ALPHA_SUFFIX_RE = re.compile(r"^([0-9]{4})([A-Z])$")
_ALPHA_PREFIX_RE = re.compile(r"^([A-Z])([0-9]{4})$")

def _check_number(digits: str, value: str) -> int:
    n = int(digits)
    if n < 1:
        raise ValueError(f"numeric portion of {value!r} must be 0001..9999")
    return n

def ordinal_of(value: str) -> tuple[SequenceType, int]:
    """Scheme and 1-based ordinal of a suffix; ``ValueError`` if it is not one."""
    m = _NUMERIC_RE.match(value)
    if m:
        return SequenceType.NUMERIC, _check_number(m.group(1), value)
    m = _ALPHA_SUFFIX_RE.match(value)
    if m:
        n = _check_number(m.group(1), value)
        return SequenceType.ALPHA_SUFFIX, NUMBER_MAX * (1 + LETTERS.index(m.group(2))) + n
    m = _ALPHA_PREFIX_RE.match(value)
    if m:
        n = _check_number(m.group(2), value)
        return SequenceType.ALPHA_PREFIX, NUMBER_MAX * (1 + LETTERS.index(m.group(1))) + n
    raise ValueError(f"{value!r} is not a sequence suffix")

def classify(value: str) -> SequenceType:
    return ordinal_of(value)[0]

def render(ordinal: int, alpha_scheme: SequenceType) -> tuple[SequenceType, str]:
    if not 1 <= ordinal <= MAX_ORDINAL:
        raise ValueError(f"ordinal {ordinal} out of range 1..{MAX_ORDINAL}")
    if ordinal <= NUMBER_MAX:
        return SequenceType.NUMERIC, f"{ordinal:0{NUMBER_WIDTH}d}"
    letter_index, n = divmod(ordinal - NUMBER_MAX - 1, NUMBER_MAX)
    letter = LETTERS[letter_index]
    number = f"{n + 1:0{NUMBER_WIDTH}d}"
    if alpha_scheme == SequenceType.ALPHA_PREFIX:
        return SequenceType.ALPHA_PREFIX, letter + number
    return SequenceType.ALPHA_SUFFIX, number + letter

def first_value() -> str:
    return render(1, SequenceType.ALPHA_SUFFIX)[1]

def remaining(current: str | None) -> int:
    if current is None:
        return MAX_ORDINAL
    return MAX_ORDINAL - ordinal_of(current)[1]

def advance(current: str | None, count: int, overflow_policy: SequenceType) -> list[tuple[SequenceType, str]]:
    """The next ``count`` suffixes after ``current`` (``None`` = nothing issued yet).

    A counter already in an alphanumeric scheme stays in it whatever the
    policy says; the policy only decides the promotion out of Numeric.
    All-or-nothing: if fewer than ``count`` suffixes remain, nothing is
    returned and ``SequenceExhausted`` is raised.
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    if overflow_policy == SequenceType.NUMERIC:
        raise ValueError("overflow policy must be an alphanumeric scheme")
    if current is None:
        scheme, start = SequenceType.NUMERIC, 0
    else:
        scheme, start = ordinal_of(current)
    alpha_scheme = scheme if scheme != SequenceType.NUMERIC else overflow_policy
    left = MAX_ORDINAL - start
    if count > left:
        raise SequenceExhausted(
            f"sequence exhausted: requested {count}, {left} left after {current}",
            current=current, requested=count, remaining=left,
        )
    return [render(o, alpha_scheme) for o in range(start + 1, start + count + 1)]
