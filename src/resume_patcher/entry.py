"""Parse structured job details and build the paragraphs of a new entry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .document import Paragraph, clone_paragraph, set_paragraph_text
from .errors import InvalidJobDetails
from .template import Template

logger = logging.getLogger(__name__)

BULLET_LINE_PREFIX = "- "
DEFAULT_BULLET_PREFIX = "• "


@dataclass(frozen=True)
class JobEntry:
    """One job as produced by the structuring step."""

    title: str
    period: str
    bullets: tuple[str, ...] = field(default_factory=tuple)


def parse_job_details(text: str) -> JobEntry:
    """Parse the structured job text block.

    Line 1 is the title, line 2 the period/location; later lines starting
    with ``"- "`` are bullets. Blank lines are skipped and any other line is
    ignored.

    Args:
        text: Structured job details.

    Returns:
        The parsed JobEntry.

    Raises:
        InvalidJobDetails: If fewer than two non-empty lines are present.
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if len(lines) < 2:
        raise InvalidJobDetails(len(lines))

    bullets = tuple(
        line[len(BULLET_LINE_PREFIX):].strip()
        for line in lines[2:]
        if line.startswith(BULLET_LINE_PREFIX)
    )
    ignored = len(lines) - 2 - len(bullets)
    if ignored:
        logger.debug("Ignoring %d job detail line(s) without a bullet marker", ignored)

    return JobEntry(title=lines[0], period=lines[1], bullets=bullets)


def _from_donor(donor: Paragraph, text: str) -> Paragraph:
    paragraph = clone_paragraph(donor)
    set_paragraph_text(paragraph, text)
    return paragraph


def build_entry(
    job: JobEntry,
    template: Template,
    bullet_prefix: str = DEFAULT_BULLET_PREFIX,
) -> list[Paragraph]:
    """Build the detached paragraphs for a job entry.

    Produces title, period, one paragraph per bullet and a blank spacer
    (formatted like the title) that separates the entry from the next one.
    Donor paragraphs are cloned, never modified.

    Args:
        job: Parsed job details.
        template: Donor paragraphs.
        bullet_prefix: Glyph prepended to every bullet text.

    Returns:
        Paragraphs ready for DocumentTree.insert_after / insert_before.
    """
    fragment = [
        _from_donor(template.title, job.title),
        _from_donor(template.period, job.period),
    ]
    for bullet in job.bullets:
        fragment.append(_from_donor(template.bullet, f"{bullet_prefix}{bullet}"))
    fragment.append(_from_donor(template.title, ""))
    return fragment
