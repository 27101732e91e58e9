"""Locate the experience section of a resume document."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable
from xml.etree import ElementTree as ET

from .document import DocumentTree, Paragraph
from .errors import SectionNotFound

logger = logging.getLogger(__name__)

DEFAULT_HEADINGS = ("experience", "employment history")

_RE_HEADING_STYLE = re.compile(r"heading\s*(\d+)$", re.IGNORECASE)


@dataclass(frozen=True, eq=False)
class Section:
    """A heading paragraph, its container, and the paragraphs it governs.

    ``paragraphs`` starts with the heading itself.
    """

    heading: Paragraph
    container: ET.Element
    paragraphs: tuple[Paragraph, ...]

    @property
    def body(self) -> tuple[Paragraph, ...]:
        """Paragraphs after the heading."""
        return self.paragraphs[1:]


def heading_level(style_id: str | None) -> int | None:
    """Outline level implied by a paragraph style id.

    ``Title`` is 0, ``Heading1`` / ``heading 1`` is 1, and so on. Any other
    style is not a heading.
    """
    if not style_id:
        return None
    if style_id.lower() == "title":
        return 0
    match = _RE_HEADING_STYLE.match(style_id.strip())
    if match:
        return int(match.group(1))
    return None


def _section_paragraphs(tree: DocumentTree, heading: Paragraph) -> tuple[Paragraph, ...]:
    siblings = tree.paragraphs_in(heading.parent)
    start = next(i for i, p in enumerate(siblings) if p is heading)
    level = heading_level(heading.style_id)
    end = len(siblings)
    if level is not None:
        for i in range(start + 1, len(siblings)):
            other = heading_level(siblings[i].style_id)
            if other is not None and other <= level:
                end = i
                break
    return tuple(siblings[start:end])


def find_section(tree: DocumentTree, headings: Iterable[str] = DEFAULT_HEADINGS) -> Section:
    """Find the first paragraph whose text contains a heading phrase.

    Matching is a case-insensitive substring test over the flattened
    paragraph text, in document order.

    Args:
        tree: Parsed document.
        headings: Phrases identifying the experience heading.

    Returns:
        The located Section.

    Raises:
        SectionNotFound: If no paragraph matches.
    """
    headings = list(headings)
    phrases = [h.lower() for h in headings]
    for paragraph in tree.paragraphs:
        text = paragraph.text.lower()
        if any(phrase in text for phrase in phrases):
            section = Section(
                heading=paragraph,
                container=paragraph.parent,
                paragraphs=_section_paragraphs(tree, paragraph),
            )
            logger.debug(
                "Experience heading at paragraph %d: %r (%d paragraphs in section)",
                tree.index(paragraph), paragraph.text, len(section.paragraphs),
            )
            return section

    raise SectionNotFound(headings)
