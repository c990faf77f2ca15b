"""Text and number cleanup for vendor email cells."""

import re

_STRIP_CHARS = re.compile(r"[$,()]")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_INT = re.compile(r"^\s*(-?\d+)")
_WS = re.compile(r"\s+")

# Entities the vendor emits in fund names ("S&amp;P 500")
HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#039;": "'",
    "&nbsp;": " ",
}


def parse_number(value: str | None) -> float:
    """
    Parse a currency, percentage or plain number cell.

    "$(1,234.56)" -> -1234.56, "22%" -> 22.0, "" / "N/A" -> 0.0.
    Percentages keep their bare value (no /100 scaling).
    """
    if not value:
        return 0.0

    cleaned = _STRIP_CHARS.sub("", value).strip()
    is_negative = "(" in value or cleaned.startswith("-")

    try:
        number = float(_NON_NUMERIC.sub("", cleaned))
    except ValueError:
        return 0.0

    return -abs(number) if is_negative else number


def parse_int(value: str | None) -> int:
    """Leading integer of a cell, 0 when there is none."""
    if not value:
        return 0
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def decode_html_entities(text: str | None) -> str:
    if not text:
        return text or ""
    for entity, replacement in HTML_ENTITIES.items():
        text = text.replace(entity, replacement)
    return text


def clean_text(text: str | None) -> str:
    """Collapse runs of whitespace (including non-breaking spaces) and trim."""
    if text is None:
        return ""
    return _WS.sub(" ", text.replace("\xa0", " ")).strip()
