"""Status-ticket description editing - pure text logic, no I/O.

A status ticket's description is a running weekly log laid out as day blocks,
each split into lettered sections:

    🧩Day 3: November 12, 2025
    A. Planned items
    - Review auth PR
    B. Completed items
    - Fixed login flow

The document is parsed once into an explicit tree (blocks -> sections) with
absolute offsets into the original text. Appends are a single insertion at a
computed offset, so every other character keeps its position and value.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

# Leading glyphs/emphasis are allowed, list bullets are not: "- Day 2: ..." is content.
DAY_HEADER_RE = re.compile(
    r"^(?![ \t]*[-*+][ \t])(?:[^\w\n]|_)*day[ \t]+(?P<number>\d+)[ \t]*:(?P<label>[^\n]*)",
    re.IGNORECASE | re.MULTILINE,
)

SECTION_HEADING_RE = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]*)?[*_]*[ \t]*(?P<marker>[A-Za-z]|\d{1,2})\.[ \t]+"
    r"(?P<title>\S[^\n]*?)[ \t]*[*_]*[ \t]*\r?$",
    re.MULTILINE,
)

LINE_END_RE = re.compile(r"[ \t]*\r?\n?")

PREVIEW_CHARS = 400


class StatusTicketError(Exception):
    """Base class for status-ticket editing failures."""

    pass


class NoSectionsFound(StatusTicketError):
    """The document has no recognizable "Day N:" headers."""

    def __init__(self) -> None:
        super().__init__("No 'Day N:' headers found in ticket description")


class DateNotFound(StatusTicketError):
    """No day block contains the target date text."""

    def __init__(self, date_text: str):
        self.date_text = date_text
        super().__init__(f"No day block mentions '{date_text}'")


class SectionNotFound(StatusTicketError):
    """The selected day block has no heading matching the requested title."""

    def __init__(self, title: str, block_heading: str):
        self.title = title
        self.block_heading = block_heading
        super().__init__(f"Section '{title}' not found in block '{block_heading}'")


class SafetyViolation(StatusTicketError):
    """The composed document would lose or alter existing text."""

    pass


class DisambiguationUnavailable(StatusTicketError):
    """The disambiguator failed or gave an unusable answer. Never fatal."""

    pass


@dataclass(frozen=True)
class Section:
    """A lettered/numbered sub-region of a day block."""

    marker: str
    title: str
    heading: str
    heading_start: int
    start: int  # first character after the heading line
    end: int


@dataclass(frozen=True)
class DayBlock:
    """One "Day N: <label>" header and everything up to the next header."""

    index: int
    number: int
    header: str
    label: str
    start: int
    header_end: int
    end: int
    sections: tuple[Section, ...] = ()


@dataclass(frozen=True)
class Candidate:
    """What a disambiguator gets to see about one matching block."""

    index: int
    heading: str
    preview: str


Disambiguator = Callable[[list[Candidate]], int | None]


@dataclass
class StatusDocument:
    """Parsed status-ticket description."""

    text: str
    blocks: list[DayBlock] = field(default_factory=list)

    def block_text(self, block: DayBlock) -> str:
        return self.text[block.start:block.end]

    def section_text(self, section: Section) -> str:
        return self.text[section.start:section.end]


@dataclass
class AppendResult:
    """Outcome of a successful append."""

    text: str
    block: DayBlock
    section: Section
    insert_at: int
    inserted: str
    chosen_by: str = "default"


# ============== Segmentation ==============


def _segment_sections(text: str, body_start: int, body_end: int) -> tuple[Section, ...]:
    """Find headings between body_start and body_end, in order."""
    matches = list(SECTION_HEADING_RE.finditer(text, body_start, body_end))
    sections = []
    for i, m in enumerate(matches):
        start = m.end()
        if start < body_end and text[start] == "\n":
            start += 1
        end = matches[i + 1].start() if i + 1 < len(matches) else body_end
        sections.append(
            Section(
                marker=m.group("marker"),
                title=m.group("title").strip(),
                heading=m.group(0).strip(),
                heading_start=m.start(),
                start=start,
                end=end,
            )
        )
    return tuple(sections)


def find_day_headers(text: str) -> list[re.Match]:
    """All day header matches in document order."""
    return list(DAY_HEADER_RE.finditer(text))


def segment(text: str) -> StatusDocument:
    """
    Split a description into day blocks, each with its sections.

    Raises NoSectionsFound when no day header is present.
    """
    headers = find_day_headers(text)
    if not headers:
        raise NoSectionsFound()

    blocks = []
    for i, m in enumerate(headers):
        end = headers[i + 1].start() if i + 1 < len(headers) else len(text)
        blocks.append(
            DayBlock(
                index=i,
                number=int(m.group("number")),
                header=m.group(0).strip(),
                label=m.group("label").strip().strip("*_").strip(),
                start=m.start(),
                header_end=m.end(),
                end=end,
                sections=_segment_sections(text, m.end(), end),
            )
        )
    return StatusDocument(text=text, blocks=blocks)


# ============== Block selection ==============


def match_blocks(doc: StatusDocument, date_text: str) -> list[DayBlock]:
    """Blocks whose text contains date_text (case-insensitive)."""
    needle = date_text.strip().casefold()
    if not needle:
        raise ValueError("Target date text must not be empty")
    matches = [b for b in doc.blocks if needle in doc.block_text(b).casefold()]
    if not matches:
        raise DateNotFound(date_text)
    return matches


def candidates_for(doc: StatusDocument, blocks: list[DayBlock]) -> list[Candidate]:
    return [
        Candidate(index=b.index, heading=b.header, preview=doc.block_text(b)[:PREVIEW_CHARS])
        for b in blocks
    ]


def select_block(
    doc: StatusDocument,
    date_text: str,
    disambiguate: Disambiguator | None = None,
) -> tuple[DayBlock, str]:
    """
    Pick the block to edit.

    Defaults to the last matching block. With several matches and a
    disambiguator, its choice wins only if it names one of the candidates.
    Returns (block, chosen_by) where chosen_by is "default" or "disambiguator".
    """
    matches = match_blocks(doc, date_text)
    default = matches[-1]
    if len(matches) == 1 or disambiguate is None:
        return default, "default"

    try:
        choice = disambiguate(candidates_for(doc, matches))
    except Exception as e:
        logger.warning(f"Disambiguation failed, using last match: {e}")
        return default, "default"

    by_index = {b.index: b for b in matches}
    if not isinstance(choice, int) or isinstance(choice, bool) or choice not in by_index:
        logger.warning(f"Disambiguator returned {choice!r}, not one of {sorted(by_index)}; using last match")
        return default, "default"

    logger.debug(f"Disambiguator picked block {choice} over default {default.index}")
    return by_index[choice], "disambiguator"


# ============== Section location ==============


def locate_section(block: DayBlock, title: str) -> Section:
    """First section in the block whose heading title contains title."""
    needle = title.strip().casefold()
    if not needle:
        raise ValueError("Target section title must not be empty")
    for section in block.sections:
        if needle in section.title.casefold():
            return section
    raise SectionNotFound(title, block.header)


# ============== Append ==============


def format_items(items: list[str]) -> list[str]:
    """Turn items into single-line "- " bullets, dropping blank ones."""
    bullets = []
    for item in items:
        line = " ".join(item.split())
        if line:
            bullets.append(f"- {line}")
    return bullets


def insertion_point(text: str, section: Section) -> int:
    """Offset just after the last non-blank line of the section's content."""
    content = text[section.start:section.end]
    kept = len(content.rstrip(" \t\r\n"))
    if kept == 0:
        return section.start
    # Trailing spaces stay on their line (Markdown hard breaks).
    m = LINE_END_RE.match(text, section.start + kept, section.end)
    return m.end()


def line_ending(text: str) -> str:
    """The document's newline convention."""
    return "\r\n" if "\r\n" in text else "\n"


def append_items(text: str, section: Section, items: list[str]) -> tuple[str, int, str]:
    """
    Insert bullets at the end of a section's existing content.

    Returns (new_text, insert_at, inserted).
    """
    bullets = format_items(items)
    if not bullets:
        raise ValueError("Nothing to append: all items are blank")

    at = insertion_point(text, section)
    newline = line_ending(text)
    inserted = newline.join(bullets) + newline
    if at > 0 and text[at - 1] != "\n":
        inserted = newline + inserted
    return text[:at] + inserted + text[at:], at, inserted


def verify_append(original: str, updated: str, insert_at: int, inserted: str) -> None:
    """Refuse any result that drops, alters or restructures existing text."""
    if len(updated) < len(original):
        raise SafetyViolation(
            f"Updated description is shorter than the original ({len(updated)} < {len(original)})"
        )
    if updated[:insert_at] != original[:insert_at]:
        raise SafetyViolation("Text before the insertion point changed")
    if updated[insert_at + len(inserted):] != original[insert_at:]:
        raise SafetyViolation("Text after the insertion point changed")
    if len(find_day_headers(updated)) != len(find_day_headers(original)):
        raise SafetyViolation("Append changed the number of day headers")


def compose_append(
    document_text: str,
    target_date_text: str,
    target_section_title: str,
    items: list[str],
    disambiguate: Disambiguator | None = None,
) -> AppendResult:
    """Run segment -> select -> locate -> append -> verify, raising on any failure."""
    doc = segment(document_text)
    block, chosen_by = select_block(doc, target_date_text, disambiguate)
    section = locate_section(block, target_section_title)
    updated, at, inserted = append_items(document_text, section, items)
    verify_append(document_text, updated, at, inserted)
    return AppendResult(
        text=updated,
        block=block,
        section=section,
        insert_at=at,
        inserted=inserted,
        chosen_by=chosen_by,
    )


def append_to_status_section(
    document_text: str,
    target_date_text: str,
    target_section_title: str,
    items: list[str],
    disambiguate: Disambiguator | None = None,
) -> str:
    """Return a copy of document_text with items appended to the target section."""
    return compose_append(
        document_text, target_date_text, target_section_title, items, disambiguate
    ).text
