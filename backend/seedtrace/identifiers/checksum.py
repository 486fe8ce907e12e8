"""Luhn-style (mod 10) check digit for full serial numbers.

Digits are walked right to left starting at the digit immediately left of
the check position.  That digit is position 1; every second digit after it
(positions 2, 4, 6, ...) is doubled, and 9 is subtracted from doubled
values above 9.  The check digit brings the total to a multiple of 10.

Detects every single-digit substitution.

    >>> compute("011001020251206000100001003551")
    7
    >>> verify("0110010202512060001000010035517")
    True
"""


def _is_digits(value: str) -> bool:
    # str.isdigit() accepts superscripts and other unicode digits
    return bool(value) and all("0" <= c <= "9" for c in value)


def compute(digits: str) -> int:
    """Return the check digit for ``digits`` (check position excluded).

    Raises:
        ValueError: if ``digits`` is empty or contains a non-digit.
    """
    if not _is_digits(digits):
        raise ValueError(f"Check digit input must be a non-empty digit string, got {digits!r}")

    total = 0
    for position, char in enumerate(reversed(digits), start=1):
        digit = ord(char) - 48
        if position % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return (10 - total % 10) % 10


def append(digits: str) -> str:
    """Return ``digits`` with its check digit appended."""
    return f"{digits}{compute(digits)}"


def verify(value: str, length: int | None = None) -> bool:
    """True when the last digit of ``value`` is the check digit of the rest.

    Non-digit characters, fewer than two digits, or a length different from
    ``length`` (when given) all fail verification.
    """
    if not isinstance(value, str) or len(value) < 2 or not _is_digits(value):
        return False
    if length is not None and len(value) != length:
        return False
    return compute(value[:-1]) == ord(value[-1]) - 48
