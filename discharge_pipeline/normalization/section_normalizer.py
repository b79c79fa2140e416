"""Rewrites model output into the canonical simplified-document structure.

Generation is non-deterministic: headings get repeated, reordered, or content
drifts between sections. Normalization:

1. Finds markdown headings that name a canonical section.
2. Splits the text into ranges, each running from one canonical heading to the
   next canonical heading of any name.
3. Keeps the first range per section and drops later repeats unmerged.
4. Re-emits the kept sections in canonical order.
5. Falls back to the stripped input when no canonical heading was found.
"""

from dataclasses import dataclass, field

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.normalization.sections import (
    CANONICAL_SECTIONS,
    CanonicalSection,
    match_section,
)


@dataclass
class NormalizedDocument:
    """Ordered canonical sections with their bodies."""

    sections: list[tuple[CanonicalSection, str]] = field(default_factory=list)

    def to_markdown(self) -> str:
        blocks = []
        for section, body in self.sections:
            blocks.append(f"## {section.title}\n{body}" if body else f"## {section.title}")
        return "\n\n".join(blocks)


class SectionNormalizer:
    """Produces a canonical, deduplicated, ordered section structure."""

    def normalize(self, raw_markdown: str) -> str:
        document = self.parse(raw_markdown)
        if not document.sections:
            if raw_markdown.strip():
                Log.warning("No canonical section headings found, keeping original text")
            return raw_markdown.strip()
        return document.to_markdown()

    def parse(self, raw_markdown: str) -> NormalizedDocument:
        first_bodies: dict[str, list[str]] = {}
        duplicates = 0
        current: list[str] | None = None

        for line in raw_markdown.splitlines():
            section = match_section(line)
            if section is None:
                if current is not None:
                    current.append(line)
                continue
            if section.key in first_bodies:
                duplicates += 1
                # Collect the repeat into a throwaway range so it is dropped.
                current = []
            else:
                current = []
                first_bodies[section.key] = current

        if duplicates:
            Log.info(f"Dropped {duplicates} repeated section heading(s)")

        return NormalizedDocument(
            sections=[
                (section, _trim_blank_lines(first_bodies[section.key]))
                for section in CANONICAL_SECTIONS
                if section.key in first_bodies
            ]
        )


def _trim_blank_lines(lines: list[str]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(line.rstrip() for line in lines[start:end])
