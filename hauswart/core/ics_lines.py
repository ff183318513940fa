"""ICS line codec — pure functions over the text of a task file.

Only the handful of calendar rules the task files need: line unfolding,
the VTODO region, property keys, text escaping and compact UTC stamps.
Files are edited line by line so everything outside the touched properties
survives a write, unfolded but otherwise unchanged.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from icalendar import vDatetime, vText
from icalendar.parser import Contentline, unescape_backslash

BEGIN_TODO = "BEGIN:VTODO"
END_TODO = "END:VTODO"

_UTC = ZoneInfo("UTC")


def detect_newline(content: str) -> str:
    """Return the newline convention used by *content* (CRLF wins)."""
    return "\r\n" if "\r\n" in content else "\n"


def unfold_lines(content: str) -> list[str]:
    """Join folded continuation lines into logical lines.

    A physical line starting with a space or tab continues the previous
    logical line; the leading whitespace character is dropped.
    """
    unfolded: list[str] = []
    for line in content.replace("\r\n", "\n").split("\n"):
        if line[:1] in (" ", "\t") and unfolded:
            unfolded[-1] += line[1:]
        else:
            unfolded.append(line)
    return unfolded


def property_key(line: str) -> str | None:
    """Return the upper-cased property name of a content line.

    Parameters after ``;`` are ignored. Lines without a colon, or starting
    with one, carry no property.
    """
    colon = line.find(":")
    if colon <= 0:
        return None
    return line[:colon].split(";", 1)[0].upper()


def todo_bounds(lines: list[str]) -> tuple[int, int] | None:
    """Return (begin, end) indexes of the first VTODO region, or None."""
    try:
        begin = lines.index(BEGIN_TODO)
        end = lines.index(END_TODO, begin + 1)
    except ValueError:
        return None
    return begin, end


def fold_line(line: str) -> str:
    """Fold one logical line into CRLF-separated physical lines of 75 octets."""
    return Contentline(line).to_ical().decode("utf-8")


def unescape_text(value: str) -> str:
    r"""Undo TEXT escaping; \n and \N become newlines."""
    return unescape_backslash(value)


def escape_text(value: str) -> str:
    return vText(value).to_ical().decode("utf-8")


def parse_properties(content: str) -> dict[str, str]:
    """Extract the VTODO properties of a task file.

    Keys are upper-cased, values unescaped; a later duplicate overrides an
    earlier one. A file without a complete VTODO region has no properties.
    """
    lines = unfold_lines(content)
    bounds = todo_bounds(lines)
    if bounds is None:
        return {}

    begin, end = bounds
    props: dict[str, str] = {}
    for line in lines[begin + 1 : end]:
        key = property_key(line)
        if key is None:
            continue
        props[key] = unescape_text(line[line.index(":") + 1 :])
    return props


def upsert_property(lines: list[str], key: str, value: str) -> None:
    """Replace the first line carrying *key*, or append one. Mutates *lines*.

    *value* must already be escaped.
    """
    key = key.upper()
    new_line = f"{key}:{value}"
    for i, line in enumerate(lines):
        if property_key(line) == key:
            lines[i] = new_line
            return
    lines.append(new_line)


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format *moment* (default: now) as ``YYYYMMDDThhmmssZ``."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    moment = moment.astimezone(_UTC).replace(microsecond=0)
    return vDatetime(moment).to_ical().decode("ascii")


def parse_utc_timestamp(value: str | None) -> datetime | None:
    """Parse a compact ``YYYYMMDDThhmmss[Z]`` stamp (or ISO text) as UTC.

    Returns None for empty or unparseable input.
    """
    if not value:
        return None

    try:
        parsed = vDatetime.from_ical(value.strip())
    except ValueError:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
