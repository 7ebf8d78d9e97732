from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Optional

from .errors import MetadataError

DELIMITER = "---"
DATE_FMT = "%Y-%m-%d"
NO_DATE = "-"
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class Metadata:
    title: str = ""
    date: Optional[dt.date] = None
    reading: str = ""


def parse_date(value: str, strict: bool = False) -> Optional[dt.date]:
    if DATE_RE.fullmatch(value):
        try:
            return dt.datetime.strptime(value, DATE_FMT).date()
        except ValueError:
            pass
    if strict:
        raise MetadataError(f"invalid date {value!r}, expected YYYY-MM-DD")
    return None


def extract_metadata(text: str, strict: bool = False) -> tuple[Metadata, str]:
    """Split a leading ``---`` front matter block from ``text``.

    Returns the parsed metadata and the remaining body. Text without an
    opening delimiter, or whose block is never closed, comes back unchanged
    with empty metadata.
    """
    lines = text.split("\n")
    values = {"title": "", "date": None, "reading": ""}
    opened = False
    for idx, line in enumerate(lines):
        line = line.strip().lstrip("\ufeff")
        if not line:
            continue
        if not opened:
            if line != DELIMITER:
                return Metadata(), text
            opened = True
            continue
        if line == DELIMITER:
            return Metadata(**values), "\n".join(lines[idx + 1 :])
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip()
        if key == "title":
            values["title"] = value
        elif key == "reading":
            values["reading"] = value
        elif key == "date":
            values["date"] = parse_date(value, strict)
    return Metadata(), text


def format_date(value: Optional[dt.date]) -> str:
    if value is None:
        return NO_DATE
    return f"{MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_front_matter(meta: Metadata) -> str:
    lines = [DELIMITER]
    if meta.title:
        lines.append(f"title: {meta.title}")
    if meta.date is not None:
        lines.append(f"date: {meta.date.strftime(DATE_FMT)}")
    if meta.reading:
        lines.append(f"reading: {meta.reading}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n"
