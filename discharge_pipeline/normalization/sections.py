import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CanonicalSection:
    """One of the fixed structural headings of a simplified document."""

    key: str
    title: str
    aliases: tuple[str, ...] = ()


OVERVIEW = CanonicalSection("overview", "Overview")
MEDICATIONS = CanonicalSection(
    "medications", "Your Medications", aliases=("Medications", "Your Medication")
)
APPOINTMENTS = CanonicalSection(
    "appointments",
    "Upcoming Appointments",
    aliases=("Appointments", "Follow-up Appointments"),
)
DIET_ACTIVITY = CanonicalSection(
    "diet_activity",
    "Diet & Activity",
    aliases=("Diet & Activities", "Diet and Activities"),
)
WARNING_SIGNS = CanonicalSection(
    "warning_signs", "Warning Signs", aliases=("Warning Sign", "Warning Symptoms")
)

CANONICAL_SECTIONS: tuple[CanonicalSection, ...] = (
    OVERVIEW,
    MEDICATIONS,
    APPOINTMENTS,
    DIET_ACTIVITY,
    WARNING_SIGNS,
)

HEADING_RE = re.compile(r"^\s{0,3}(#{1,6})\s+(.*?)\s*#*\s*$")

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def heading_key(title: str) -> str:
    """Reduce a heading title to a comparison key.

    Case, bold markers, punctuation, spacing and ``&`` versus ``and`` do not
    affect the key: "**Diet and Activity:**" and "Diet & Activity" collide.
    """
    text = title.casefold().replace("&", " and ")
    text = _NON_WORD_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def _build_lookup() -> dict[str, CanonicalSection]:
    lookup: dict[str, CanonicalSection] = {}
    for section in CANONICAL_SECTIONS:
        for name in (section.title, *section.aliases):
            lookup[heading_key(name)] = section
    return lookup


_LOOKUP = _build_lookup()


def match_section(line: str) -> CanonicalSection | None:
    """Return the canonical section a markdown heading line opens, if any."""
    match = HEADING_RE.match(line)
    if match is None:
        return None
    return _LOOKUP.get(heading_key(match.group(2)))
