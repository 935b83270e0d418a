import re

_WHITESPACE = re.compile(r"\s+")


def normalize_plate(plate_text: str) -> str:
    """
    Canonical plate form used for storage and lookup: uppercase, all whitespace removed.

    `normalize_plate("ab 12 cde") == normalize_plate("AB12CDE") == "AB12CDE"`
    """
    if not plate_text:
        return ""
    return _WHITESPACE.sub("", plate_text.upper())
