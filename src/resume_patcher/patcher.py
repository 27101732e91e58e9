"""Insert a structured job entry into the experience section of a DOCX resume.

Pipeline: open package -> parse main part -> locate section -> extract
template -> parse job details -> build entry -> insert after the heading ->
rewrite main part -> serialize -> validate.

Only the main content part is rewritten. Styles, numbering, theme,
relationships, font table, settings and media pass through byte-identical.
"""

from __future__ import annotations

import logging
import os

from .config.settings import Settings
from .config.settings import settings as default_settings
from .document import parse
from .entry import build_entry, parse_job_details
from .errors import PatchError
from .locator import find_section
from .package import Package
from .template import extract_template
from .validation import ValidationReport, validate

logger = logging.getLogger(__name__)


def _log_report(report: ValidationReport) -> None:
    for issue in report.errors:
        logger.error("Validation [%s]: %s", issue.check, issue.message)
    for issue in report.warnings:
        logger.warning("Validation [%s]: %s", issue.check, issue.message)


def patch(
    package_bytes: bytes,
    job_details_text: str,
    settings: Settings | None = None,
) -> bytes:
    """Return a copy of the package with the job entry inserted.

    The new entry becomes the topmost entry of the experience section and
    reuses the formatting of the first existing entry.

    Args:
        package_bytes: The original .docx file. Never modified.
        job_details_text: Title line, period line, then "- " bullet lines.
        settings: Patcher settings (default: the global settings).

    Returns:
        The updated .docx as bytes.

    Raises:
        FormatError: The package lacks its main part or it is malformed.
        SectionNotFound: No experience heading in the document.
        TemplateNotFound: No existing entry to copy formatting from.
        InvalidJobDetails: Fewer than two usable lines of job details.
    """
    cfg = settings or default_settings
    logger.info("Starting resume patch (%d bytes)", len(package_bytes))

    try:
        package = Package.open(package_bytes, main_part=cfg.main_part)
        original_xml = package.get_part(cfg.main_part)
        tree = parse(original_xml)

        section = find_section(tree, cfg.heading_phrases)
        template = extract_template(
            section,
            lookahead=cfg.bullet_lookahead,
            markers=cfg.bullet_markers,
        )
        job = parse_job_details(job_details_text)
        fragment = build_entry(job, template, bullet_prefix=cfg.bullet_prefix)

        tree.insert_after(section.heading, fragment)
        package.set_part(cfg.main_part, tree.to_xml(original_xml))
        output = package.serialize()
    except PatchError as e:
        logger.error("Resume patch failed [%s]: %s", e.kind.value, e.message)
        raise

    logger.debug("Inserted %d paragraphs; rewritten parts: %s",
                 len(fragment), ", ".join(sorted(package.dirty_parts)))

    expected = None
    if logger.isEnabledFor(logging.DEBUG):
        expected = [job.title, job.period] + [f"{cfg.bullet_prefix}{b}" for b in job.bullets]
    _log_report(validate(output, expected_texts=expected, main_part=cfg.main_part))

    logger.info("Resume patch completed (%d bytes)", len(output))
    return output


def updated_path(file_path: str, suffix: str) -> str:
    """Return ``<dir>/<stem><suffix><ext>`` for a file path."""
    directory, filename = os.path.split(file_path)
    stem, ext = os.path.splitext(filename)
    return os.path.join(directory, f"{stem}{suffix}{ext}")


def patch_file(
    file_path: str,
    job_details_text: str,
    settings: Settings | None = None,
) -> str:
    """Patch a .docx file and write the result beside it.

    The input file is only read. The output is written to
    ``<stem><output_suffix><ext>`` in the same directory.

    Args:
        file_path: Path to the original .docx.
        job_details_text: Structured job details.
        settings: Patcher settings (default: the global settings).

    Returns:
        Path of the updated file.
    """
    cfg = settings or default_settings
    with open(file_path, "rb") as f:
        data = f.read()

    output = patch(data, job_details_text, settings=cfg)

    output_path = updated_path(file_path, cfg.output_suffix)
    with open(output_path, "wb") as f:
        f.write(output)
    logger.info("Wrote updated resume: %s", output_path)
    return output_path
