import pytest

from batchcodes.core.errors import SequenceExhausted
from batchcodes.modules.sequences import schemes
from batchcodes.modules.sequences.schemes import SequenceType

SUFFIX = SequenceType.ALPHA_SUFFIX
PREFIX = SequenceType.ALPHA_PREFIX


def values(issued):
    return [v for _, v in issued]


def test_first_value_is_numeric_0001():
    assert schemes.first_value() == "0001"
    assert schemes.advance(None, 1, SUFFIX) == [(SequenceType.NUMERIC, "0001")]


def test_numeric_increments_by_one_zero_padded():
    assert values(schemes.advance("0009", 3, SUFFIX)) == ["0010", "0011", "0012"]
    assert values(schemes.advance("9998", 1, SUFFIX)) == ["9999"]


@pytest.mark.parametrize("policy,expected", [
    (SUFFIX, (SequenceType.ALPHA_SUFFIX, "0001A")),
    (PREFIX, (SequenceType.ALPHA_PREFIX, "A0001")),
])
def test_numeric_9999_promotes_per_policy(policy, expected):
    assert schemes.advance("9999", 1, policy) == [expected]


def test_alpha_suffix_advances_letter_after_9999():
    assert values(schemes.advance("9998A", 3, SUFFIX)) == ["9999A", "0001B", "0002B"]


def test_alpha_prefix_advances_letter_after_9999():
    assert values(schemes.advance("A9999", 2, PREFIX)) == ["B0001", "B0002"]


def test_existing_alpha_scheme_wins_over_policy():
    # a counter promoted under one policy keeps its shape if the policy changes later
    assert schemes.advance("0005A", 1, PREFIX) == [(SequenceType.ALPHA_SUFFIX, "0006A")]
    assert schemes.advance("C0005", 1, SUFFIX) == [(SequenceType.ALPHA_PREFIX, "C0006")]


@pytest.mark.parametrize("last", ["9999Z", "Z9999"])
def test_last_value_is_exhausted(last):
    assert schemes.remaining(last) == 0
    with pytest.raises(SequenceExhausted):
        schemes.advance(last, 1, SUFFIX)


def test_block_that_does_not_fit_consumes_nothing():
    assert schemes.remaining("9998Z") == 1
    with pytest.raises(SequenceExhausted) as info:
        schemes.advance("9998Z", 2, SUFFIX)
    assert info.value.context["remaining"] == 1
    assert values(schemes.advance("9998Z", 1, SUFFIX)) == ["9999Z"]


def test_ordinals_follow_allocation_order():
    assert schemes.ordinal_of("0001") == (SequenceType.NUMERIC, 1)
    assert schemes.ordinal_of("9999") == (SequenceType.NUMERIC, 9999)
    assert schemes.ordinal_of("0001A") == (SequenceType.ALPHA_SUFFIX, 10000)
    assert schemes.ordinal_of("A0001") == (SequenceType.ALPHA_PREFIX, 10000)
    assert schemes.ordinal_of("9999Z")[1] == schemes.MAX_ORDINAL
    assert schemes.MAX_ORDINAL == 9999 * 27


@pytest.mark.parametrize("bad", ["0000", "0000A", "A0000", "123", "12345", "AB12", "0001a", "", "00A01"])
def test_ordinal_of_rejects_non_suffixes(bad):
    with pytest.raises(ValueError):
        schemes.ordinal_of(bad)


def test_numeric_policy_is_rejected():
    with pytest.raises(ValueError):
        schemes.advance("0001", 1, SequenceType.NUMERIC)
