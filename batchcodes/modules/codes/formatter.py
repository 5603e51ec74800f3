"""Canonical batch-code string <-> structured fields.

Layout::

    YY MM F T III P [-K] SSSS(S)
    25 01 A I BPZ M       0001      -> 2501AIBPZM0001
    25 01 A I BPZ M  -B   0001A     -> 2501AIBPZM-B0001A

The package type, when present, is marked with ``-`` (the bulk-package
marker printed on existing labels), so the suffix width can vary by scheme
without making the layout ambiguous.
"""
import re
from batchcodes.core.errors import InvalidCode, MalformedCode
from batchcodes.modules.codes.types import DimensionCombination, Period, ParsedCode
from batchcodes.modules.sequences import schemes

PACKAGE_MARKER = "-"

# field -> exact width; all code fields use upper-case letters and digits
FIELD_WIDTHS = {
    "funding_source": 1,
    "medicine_type": 1,
    "active_ingredient": 3,
    "producer": 1,
    "package_type": 1,
}
_FIELD_RE = {name: re.compile(rf"^[A-Z0-9]{{{width}}}$") for name, width in FIELD_WIDTHS.items()}

_CODE_RE = re.compile(
    r"^(?P<year>[0-9]{2})(?P<month>0[1-9]|1[0-2])"
    r"(?P<funding_source>[A-Z0-9])(?P<medicine_type>[A-Z0-9])"
    r"(?P<active_ingredient>[A-Z0-9]{3})(?P<producer>[A-Z0-9])"
    r"(?:-(?P<package_type>[A-Z0-9]))?"
    r"(?P<suffix>[0-9A-Z]{4,5})$"
)

MIN_LENGTH = 10 + schemes.NUMBER_WIDTH
MAX_LENGTH = 10 + len(PACKAGE_MARKER) + 1 + schemes.SUFFIX_MAX_LENGTH

def validate_field(name: str, value: str) -> None:
    if not _FIELD_RE[name].match(value or ""):
        raise InvalidCode(
            f"{name} code must be {FIELD_WIDTHS[name]} upper-case letter(s)/digit(s), got {value!r}",
            field=name, value=value,
        )

def validate_combination(combination: DimensionCombination) -> None:
    for name in FIELD_WIDTHS:
        value = getattr(combination, name)
        if name == "package_type" and value == "":
            continue
        validate_field(name, value)

def format_code(combination: DimensionCombination, period: Period, suffix: str) -> str:
    validate_combination(combination)
    try:
        Period.parse(str(period))
        schemes.ordinal_of(suffix)
    except ValueError as e:
        raise InvalidCode(str(e)) from e
    head = f"{period}{combination.funding_source}{combination.medicine_type}{combination.active_ingredient}{combination.producer}"
    if combination.package_type:
        head += PACKAGE_MARKER + combination.package_type
    return head + suffix

def parse_code(code: str) -> ParsedCode:
    if not isinstance(code, str) or not MIN_LENGTH <= len(code) <= MAX_LENGTH:
        raise MalformedCode(f"code must be {MIN_LENGTH}..{MAX_LENGTH} characters", code=code)
    m = _CODE_RE.match(code)
    if not m:
        raise MalformedCode("code does not match YYMM F T III P [-K] suffix", code=code)
    try:
        schemes.ordinal_of(m.group("suffix"))
    except ValueError as e:
        raise MalformedCode(str(e), code=code) from e
    combination = DimensionCombination(
        funding_source=m.group("funding_source"),
        medicine_type=m.group("medicine_type"),
        active_ingredient=m.group("active_ingredient"),
        producer=m.group("producer"),
        package_type=m.group("package_type") or "",
    )
    return ParsedCode(combination=combination, period=Period(m.group("year"), m.group("month")), suffix=m.group("suffix"))
