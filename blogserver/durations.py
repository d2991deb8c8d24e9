"""Parsing of compact duration strings such as ``1d2h30m``."""

import re
from datetime import timedelta

_UNITS = (
    ("d", timedelta(days=1)),
    ("h", timedelta(hours=1)),
    ("m", timedelta(minutes=1)),
    ("s", timedelta(seconds=1)),
)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration made of integer amounts of days, hours, minutes and seconds.

    The units are consumed in the order ``d``, ``h``, ``m``, ``s``; an empty
    amount before a unit counts as zero.  Raises ``ValueError`` for an empty
    string, a non-integer amount or trailing text without a unit.
    """
    remaining = text.strip()
    if not remaining:
        raise ValueError("empty duration string")

    total = timedelta()
    for unit, size in _UNITS:
        while unit in remaining:
            part, _, remaining = remaining.partition(unit)
            part = part or "0"
            if not _INTEGER.fullmatch(part):
                raise ValueError(f"invalid duration part: {part!r}")
            total += int(part) * size

    if remaining:
        raise ValueError("unrecognized duration format")
    return total