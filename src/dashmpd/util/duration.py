#!/usr/bin/python3

"""
Conversion between nanosecond time spans and the lexical form of XSD durations used in
MPEG-DASH manifests.

Only the subset of the grammar that maps onto a fixed-length span is supported: months must
be zero, a day is always 24 hours and a year is always 365 days.
"""

import re

from ..errors import MalformedDuration, MonthsNotSupported

NANOSECOND = 1
MILLISECOND = 1_000_000 * NANOSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
YEAR = 365 * DAY

_INT64_MAX = (1 << 63) - 1
_INT64_MIN = -(1 << 63)

# number of fractional second digits that fit in nanosecond resolution
_FRACTION_DIGITS = 9

_ZERO = ord("0")

DURATION_PATTERN = re.compile(
    r"(?P<sign>-)?P"
    r"(?:(?P<years>[0-9]+)Y)?"
    r"(?:(?P<months>[0-9]+)M)?"
    r"(?:(?P<days>[0-9]+)D)?"
    r"(?P<time>T"
    r"(?:(?P<hours>[0-9]+)H)?"
    r"(?:(?P<minutes>[0-9]+)M)?"
    r"(?:(?P<seconds>[0-9]+)(?:\.(?P<fraction>[0-9]+))?S)?"
    r")?"
)

_MULTIPLIERS = {
    "years": YEAR,
    "days": DAY,
    "hours": HOUR,
    "minutes": MINUTE,
    "seconds": SECOND,
}


class Duration(int):
    """
    A signed span of nanoseconds, limited to the range of a 64-bit integer.

    str() returns the canonical lexical form (e.g. ``PT1M1.1S``).  Arithmetic on instances
    returns plain ints; wrap the result again if the lexical form is needed.
    """

    __slots__ = ()

    def __new__(cls, nanoseconds: int = 0) -> "Duration":
        value = super().__new__(cls, nanoseconds)
        if not _INT64_MIN <= value <= _INT64_MAX:
            raise OverflowError(f"duration of {int(value)}ns does not fit in 64 bits")
        return value

    @classmethod
    def from_string(cls, text: str) -> "Duration":
        return parse_duration(text)

    def total_seconds(self) -> float:
        return int(self) / SECOND

    def __str__(self) -> str:
        return format_duration(self)

    def __repr__(self) -> str:
        return f"Duration({int(self)})"


def _fmt_frac(buf: bytearray, w: int, v: int, prec: int) -> int:
    # writes the fractional digits of v ending at w, omitting trailing zeros;
    # the decimal point is only written if a digit was
    printed = False
    for _ in range(prec):
        v, digit = divmod(v, 10)
        printed = printed or digit != 0
        if printed:
            w -= 1
            buf[w] = _ZERO + digit
    if printed:
        w -= 1
        buf[w] = ord(".")
    return w


def _fmt_int(buf: bytearray, w: int, v: int) -> int:
    if v == 0:
        w -= 1
        buf[w] = _ZERO
        return w
    while v > 0:
        v, digit = divmod(v, 10)
        w -= 1
        buf[w] = _ZERO + digit
    return w


def _put(buf: bytearray, w: int, designator: str) -> int:
    w -= 1
    buf[w] = ord(designator)
    return w


def format_duration(nanoseconds: int) -> str:
    """
    Returns the canonical lexical form of a duration.

    Zero-valued components are left out, except that a zero duration is written as
    ``PT0S``.  The string is assembled from the end of a fixed-size buffer towards the
    front, smallest unit first.
    """
    value = int(nanoseconds)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise OverflowError(f"duration of {value}ns does not fit in 64 bits")

    negative = value < 0
    u = -value if negative else value

    u, frac = divmod(u, SECOND)
    u, seconds = divmod(u, 60)
    u, minutes = divmod(u, 60)
    u, hours = divmod(u, 24)
    years, days = divmod(u, 365)

    # longest output is "-P292Y171DT23H47M16.854775808S"
    buf = bytearray(32)
    w = len(buf)

    if frac or seconds or value == 0:
        w = _put(buf, w, "S")
        w = _fmt_frac(buf, w, frac, _FRACTION_DIGITS)
        w = _fmt_int(buf, w, seconds)
    if minutes:
        w = _put(buf, w, "M")
        w = _fmt_int(buf, w, minutes)
    if hours:
        w = _put(buf, w, "H")
        w = _fmt_int(buf, w, hours)

    # only add 'T' if some time component was written
    if w != len(buf):
        w = _put(buf, w, "T")

    if days:
        w = _put(buf, w, "D")
        w = _fmt_int(buf, w, days)
    if years:
        w = _put(buf, w, "Y")
        w = _fmt_int(buf, w, years)

    w = _put(buf, w, "P")
    if negative:
        w = _put(buf, w, "-")

    return buf[w:].decode("ascii")


def _check_range(text: str, negative: bool, magnitude: int) -> None:
    limit = -_INT64_MIN if negative else _INT64_MAX
    if magnitude > limit:
        raise MalformedDuration(text, "duration out of range")


def _run_value(text: str, digits: str) -> int:
    # leading zeros are stripped so that int() never sees more digits than an int64 has
    significant = digits.lstrip("0") or "0"
    if len(significant) > len(str(_INT64_MAX)):
        raise MalformedDuration(text, "duration out of range")
    value = int(significant)
    if value > _INT64_MAX:
        raise MalformedDuration(text, "duration out of range")
    return value


def _scale_fraction(digits: str) -> int:
    # fixed-point conversion to nanoseconds; digits past nanosecond precision are truncated
    digits = digits[:_FRACTION_DIGITS]
    return int(digits) * 10 ** (_FRACTION_DIGITS - len(digits))


def parse_duration_pattern(text: str) -> Duration:
    """
    Parses a lexical duration by matching it against a single regular expression.

    Raises MalformedDuration if the string is not a supported duration, or
    MonthsNotSupported if it is well-formed but specifies a non-zero number of months.
    """
    match = DURATION_PATTERN.fullmatch(text)
    if not match:
        raise MalformedDuration(text)

    groups = match.groupdict()
    if groups["time"] == "T":
        # 'T' must be followed by at least one time component
        raise MalformedDuration(text)

    components = {k: v for k, v in groups.items() if v and k not in ("sign", "time")}
    if not components:
        raise MalformedDuration(text)

    values = {k: _run_value(text, v) for k, v in components.items() if k != "fraction"}

    magnitude = sum(values[k] * _MULTIPLIERS[k] for k in values if k in _MULTIPLIERS)
    if "fraction" in components:
        magnitude += _scale_fraction(components["fraction"])

    negative = groups["sign"] is not None
    _check_range(text, negative, magnitude)
    if values.get("months"):
        raise MonthsNotSupported(text)

    return Duration(-magnitude if negative else magnitude)


def _digit_run_start(text: str, i: int) -> int:
    # returns the index of the first digit in the run of ASCII digits ending at i;
    # returns i + 1 if there is no such run
    while i >= 0 and "0" <= text[i] <= "9":
        i -= 1
    return i + 1


def _atoi(text: str, start: int, end: int) -> int:
    x = 0
    for i in range(start, end):
        if x > _INT64_MAX // 10:
            raise MalformedDuration(text, "duration out of range")
        x = x * 10 + ord(text[i]) - _ZERO
        if x > _INT64_MAX:
            raise MalformedDuration(text, "duration out of range")
    return x


class _ReverseScanner:
    """
    Walks a lexical duration from its last character towards the 'P' designator,
    consuming one component at a time.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = len(text) - 1
        self.components = 0

    def peek(self) -> str | None:
        if self.pos < 0:
            return None
        return self.text[self.pos]

    def fail(self) -> MalformedDuration:
        return MalformedDuration(self.text)

    def digits(self) -> tuple[int, int]:
        # consumes the run of digits ending at the cursor and returns its bounds
        end = self.pos + 1
        start = _digit_run_start(self.text, self.pos)
        if start == end:
            raise self.fail()
        self.pos = start - 1
        return start, end

    def component(self, designator: str) -> int | None:
        if self.peek() != designator:
            return None
        self.pos -= 1
        value = _atoi(self.text, *self.digits())
        self.components += 1
        return value

    def seconds(self) -> int | None:
        if self.peek() != "S":
            return None
        self.pos -= 1
        start, end = self.digits()
        nanoseconds = 0
        if self.peek() == ".":
            nanoseconds = _atoi(self.text, start, min(end, start + _FRACTION_DIGITS))
            nanoseconds *= 10 ** max(0, _FRACTION_DIGITS - (end - start))
            self.pos -= 1
            start, end = self.digits()
        self.components += 1
        return _atoi(self.text, start, end) * SECOND + nanoseconds


def parse_duration(text: str) -> Duration:
    """
    Parses a lexical duration by scanning it backwards from the last character.

    Accepts and rejects exactly the same strings as parse_duration_pattern and raises the
    same exceptions, but avoids the regular expression engine.
    """
    scanner = _ReverseScanner(text)
    magnitude = 0

    if "T" in text:
        seconds = scanner.seconds()
        minutes = scanner.component("M")
        hours = scanner.component("H")
        if seconds is None and minutes is None and hours is None:
            raise scanner.fail()
        magnitude += (seconds or 0) + (minutes or 0) * MINUTE + (hours or 0) * HOUR
        if scanner.peek() != "T":
            raise scanner.fail()
        scanner.pos -= 1

    days = scanner.component("D")
    months = scanner.component("M")
    years = scanner.component("Y")
    magnitude += (days or 0) * DAY + (years or 0) * YEAR

    if scanner.peek() != "P" or scanner.components == 0:
        raise scanner.fail()
    if scanner.pos == 0:
        negative = False
    elif scanner.pos == 1 and text[0] == "-":
        negative = True
    else:
        raise scanner.fail()

    _check_range(text, negative, magnitude)
    if months:
        raise MonthsNotSupported(text)

    return Duration(-magnitude if negative else magnitude)
