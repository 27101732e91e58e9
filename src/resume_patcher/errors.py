"""Typed failures raised by the patch pipeline.

Every failure is fatal to a single patch call and carries an ``ErrorKind``
so callers (HTTP handlers, job runners) can map it without string matching.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Discriminator for patch failures."""

    MISSING_MAIN_PART = "missing_main_part"
    MALFORMED_XML = "malformed_xml"
    SECTION_NOT_FOUND = "section_not_found"
    TEMPLATE_NOT_FOUND = "template_not_found"
    INVALID_JOB_DETAILS = "invalid_job_details"


INVALID_RESUME_FORMAT = "Invalid resume format or structure."
EXPERIENCE_SECTION_NOT_FOUND = "Could not find experience section in resume."
TEMPLATE_NOT_FOUND = "Could not find job entry template in resume."
INVALID_JOB_DETAILS = "Invalid job details format."


class PatchError(Exception):
    """Base class for all patch failures."""

    kind: ErrorKind

    def __init__(self, message: str, kind: ErrorKind):
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return self.message


class FormatError(PatchError):
    """The package or one of its required XML parts is unusable."""

    def __init__(self, kind: ErrorKind, detail: str | None = None):
        if kind not in (ErrorKind.MISSING_MAIN_PART, ErrorKind.MALFORMED_XML):
            raise ValueError(f"Not a format error kind: {kind}")
        message = INVALID_RESUME_FORMAT
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, kind)
        self.detail = detail


class SectionNotFound(PatchError):
    """No paragraph matched any of the configured heading phrases."""

    def __init__(self, headings: list[str] | tuple[str, ...]):
        names = ", ".join(repr(h) for h in headings)
        super().__init__(
            f"{EXPERIENCE_SECTION_NOT_FOUND} (searched for {names})",
            ErrorKind.SECTION_NOT_FOUND,
        )
        self.headings = tuple(headings)


class TemplateNotFound(PatchError):
    """The section holds no existing entry to donate formatting."""

    def __init__(self):
        super().__init__(TEMPLATE_NOT_FOUND, ErrorKind.TEMPLATE_NOT_FOUND)


class InvalidJobDetails(PatchError):
    """The structured job text lacks a title and period line."""

    def __init__(self, line_count: int):
        super().__init__(
            f"{INVALID_JOB_DETAILS} Expected a title and a period line, got {line_count} non-empty line(s).",
            ErrorKind.INVALID_JOB_DETAILS,
        )
        self.line_count = line_count
