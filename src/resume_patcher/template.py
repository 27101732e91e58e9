"""Derive title/period/bullet formatting donors from an existing job entry."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .document import Paragraph
from .errors import TemplateNotFound
from .locator import Section

logger = logging.getLogger(__name__)

DEFAULT_BULLET_MARKERS = ("•", "-")
DEFAULT_LOOKAHEAD = 5

_RE_PARENTHESIZED = re.compile(r"\(.*?\)")
_RE_YEAR = re.compile(r"\d{4}")


class BulletSource(str, Enum):
    """How the bullet donor was chosen."""

    MATCHED = "matched"            # marker-prefixed paragraph inside the window
    WINDOW_START = "window_start"  # no marker found, first window paragraph used
    PERIOD = "period"              # window empty, period donor reused


@dataclass(frozen=True, eq=False)
class Template:
    """Donor paragraphs whose formatting is reused for a new entry.

    The donors stay owned by the document; builders must clone them.
    """

    title: Paragraph
    period: Paragraph
    bullet: Paragraph
    bullet_source: BulletSource = BulletSource.MATCHED


def is_title_candidate(text: str) -> bool:
    """True for text with a parenthesized part and a 4-digit year."""
    return bool(_RE_PARENTHESIZED.search(text)) and bool(_RE_YEAR.search(text))


def _find_bullet(
    paragraphs: Sequence[Paragraph],
    start: int,
    lookahead: int,
    markers: Sequence[str],
) -> tuple[Paragraph | None, BulletSource]:
    for paragraph in paragraphs[start:start + lookahead]:
        if paragraph.text.strip().startswith(tuple(markers)):
            return paragraph, BulletSource.MATCHED
    if start < len(paragraphs):
        return paragraphs[start], BulletSource.WINDOW_START
    return None, BulletSource.PERIOD


def extract_template(
    section: Section,
    lookahead: int = DEFAULT_LOOKAHEAD,
    markers: Sequence[str] = DEFAULT_BULLET_MARKERS,
) -> Template:
    """Pick the first existing entry in the section as formatting donor.

    The title is the first paragraph after the heading matching
    ``is_title_candidate``; the period is the paragraph right after it. The
    bullet is searched in a window of ``lookahead`` paragraphs starting two
    positions after the title.

    Args:
        section: Located experience section.
        lookahead: Size of the bullet search window.
        markers: Prefixes identifying a bullet paragraph.

    Returns:
        The Template. Repeated calls on an unchanged section return the
        same donor paragraphs.

    Raises:
        TemplateNotFound: If no paragraph in the section looks like a title.
    """
    paragraphs = section.body
    for i, paragraph in enumerate(paragraphs):
        if not is_title_candidate(paragraph.text):
            continue

        period = paragraphs[i + 1] if i + 1 < len(paragraphs) else paragraph
        if period is paragraph:
            logger.warning("Entry title %r has no following paragraph; reusing it as period donor",
                           paragraph.text)

        bullet, source = _find_bullet(paragraphs, i + 2, lookahead, markers)
        if source is BulletSource.WINDOW_START:
            logger.warning(
                "No bullet paragraph within %d paragraphs of %r; donating formatting from %r",
                lookahead, paragraph.text, bullet.text,
            )
        elif source is BulletSource.PERIOD:
            logger.warning("No paragraph follows entry %r; reusing period donor for bullets",
                           paragraph.text)
            bullet = period

        logger.debug("Template donors: title=%r period=%r bullet=%r (%s)",
                     paragraph.text, period.text, bullet.text, source.value)
        return Template(title=paragraph, period=period, bullet=bullet, bullet_source=source)

    raise TemplateNotFound()
