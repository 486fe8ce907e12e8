"""Fixed-width field helpers shared by the batch and serial codecs."""

from datetime import date, datetime

from seedtrace.identifiers.errors import (
    FieldOutOfRange,
    InvalidCharacters,
    InvalidDate,
    InvalidField,
    InvalidLength,
)


def check_range(field: str, value: int, low: int, high: int) -> int:
    """Raise FieldOutOfRange unless ``low <= value <= high``."""
    # bool is an int subclass; True would encode as "01"
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise FieldOutOfRange(field, value, f"{low}-{high}")
    return value


def check_date(field: str, value: date) -> date:
    if not isinstance(value, date):
        raise FieldOutOfRange(field, value, "a calendar date")
    if isinstance(value, datetime):
        value = value.date()
    if value.year < 1000:
        # YYYYMMDD must stay exactly 8 digits
        raise FieldOutOfRange(field, value, "year 1000-9999")
    return value


def require_digits(identifier: str, length: int, kind: str) -> str:
    """Validate the raw shape of a scanned identifier."""
    if not isinstance(identifier, str):
        raise InvalidCharacters(f"{kind} must be a string", None)
    if len(identifier) != length:
        raise InvalidLength(
            f"{kind} must be {length} digits, got {len(identifier)}", identifier
        )
    if not all("0" <= c <= "9" for c in identifier):
        raise InvalidCharacters(f"{kind} must be all numeric", identifier)
    return identifier


def parse_date(text: str, fmt: str, identifier: str) -> date:
    try:
        return datetime.strptime(text, fmt).date()
    except ValueError:
        raise InvalidDate(f"Invalid date {text!r}", identifier) from None


def parse_positive(field: str, text: str, identifier: str) -> int:
    """Parse a zero-padded counter field; all-zero means the field was never issued."""
    value = int(text)
    if value < 1:
        raise InvalidField(f"{field} must not be zero", identifier)
    return value
