"""Rewrites section headings of a translated document to fixed localized titles.

Machine translation renders "## Your Medications" differently from one call to
the next. Readers of the translated document expect the same heading every
time, so each recognised heading is replaced with the canonical title of its
language. Only heading lines are touched.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.normalization.sections import CANONICAL_SECTIONS, HEADING_RE
from discharge_pipeline.translation.exceptions import TranslationError

_DEFAULT_HEADINGS_PATH = Path(__file__).resolve().parent / "headings.json"

_WHITESPACE_RE = re.compile(r"\s+")
_AMPERSAND_RE = re.compile(r"\s*&\s*")

DIRECTION_LTR = "ltr"
DIRECTION_RTL = "rtl"


@dataclass(frozen=True)
class HeadingTable:
    """Localized section titles for one language."""

    language: str
    direction: str = DIRECTION_LTR
    titles: dict[str, str] = field(default_factory=dict)
    variants: dict[str, str] = field(default_factory=dict)

    def match_key(self, title: str) -> str:
        text = _AMPERSAND_RE.sub(" and ", title.replace("**", ""))
        text = _WHITESPACE_RE.sub(" ", text).strip().rstrip(":").strip()
        if self.direction == DIRECTION_LTR:
            return text.casefold()
        return text

    def canonical_title(self, heading_title: str) -> str | None:
        return self.variants.get(self.match_key(heading_title))


def _build_table(language: str, raw: dict[str, Any]) -> HeadingTable:
    direction = raw.get("direction", DIRECTION_LTR)
    if direction not in (DIRECTION_LTR, DIRECTION_RTL):
        raise TranslationError(f"Unknown text direction '{direction}' for {language}")

    sections: dict[str, Any] = raw.get("sections") or {}
    table = HeadingTable(language=language, direction=direction)
    for section in CANONICAL_SECTIONS:
        entry = sections.get(section.key)
        if not entry:
            continue
        title = entry["title"]
        table.titles[section.key] = title
        for name in (title, *entry.get("variants", []), section.title, *section.aliases):
            table.variants.setdefault(table.match_key(name), title)
    return table


def load_heading_tables(path: Path | None = None) -> dict[str, HeadingTable]:
    """Load per-language heading tables from a JSON file.

    Raises:
        TranslationError: if the file is missing or malformed.
    """
    file_path = path or _DEFAULT_HEADINGS_PATH
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise TranslationError(f"Cannot load heading table {file_path}: {exc}") from exc
    return {language: _build_table(language, entry) for language, entry in raw.items()}


class LocaleHeadingNormalizer:
    """Replaces recognised heading titles with the language's canonical title."""

    def __init__(self, tables: dict[str, HeadingTable] | None = None) -> None:
        self._tables = tables if tables is not None else load_heading_tables()

    @property
    def languages(self) -> list[str]:
        return sorted(self._tables)

    def normalize(self, text: str, language: str) -> str:
        table = self._tables.get(language)
        if table is None:
            return text

        rewritten = 0
        lines = text.split("\n")
        for index, line in enumerate(lines):
            match = HEADING_RE.match(line)
            if match is None:
                continue
            title = table.canonical_title(match.group(2))
            if title is None:
                continue
            replacement = f"{match.group(1)} {title}"
            if replacement != line:
                lines[index] = replacement
                rewritten += 1

        if rewritten:
            Log.debug(f"Rewrote {rewritten} heading(s)", language=language)
        return "\n".join(lines)
