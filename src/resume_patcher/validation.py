"""Structural checks of a patched DOCX package.

Checks ZIP integrity, required entries, XML well-formedness, main part
structure, namespace prefix pollution, and optionally that inserted text is
present in the main part.
"""

from __future__ import annotations

import io
import re
import zipfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable
from xml.etree import ElementTree as ET

from .package import CONTENT_TYPES_PART, MAIN_PART, decode_part

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

_RE_AUTO_NS = re.compile(r"\bns\d+:")


class Level(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Issue:
    check: str
    level: Level
    message: str


@dataclass
class ValidationReport:
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, issue: Issue) -> None:
        if issue.level is Level.ERROR:
            self.errors.append(issue)
        else:
            self.warnings.append(issue)


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------

def _err(check: str, msg: str) -> Issue:
    return Issue(check, Level.ERROR, msg)


def _warn(check: str, msg: str) -> Issue:
    return Issue(check, Level.WARNING, msg)


def _extract_all_text(xml_content: str) -> str:
    """Extract all w:t text nodes from document XML."""
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError:
        return ""
    return "".join(t.text for t in root.iter(f"{{{W_NS}}}t") if t.text)


# -------------------------------------------------------------------
# Individual validators
# -------------------------------------------------------------------

def validate_zip(zf: zipfile.ZipFile) -> list[Issue]:
    """Verify every entry decompresses with a matching CRC."""
    bad = zf.testzip()
    if bad is not None:
        return [_err("zip", f"Corrupt ZIP entry: {bad}")]
    return []


def validate_entries(zf: zipfile.ZipFile, main_part: str = MAIN_PART) -> list[Issue]:
    """Check that required OOXML entries exist."""
    names = set(zf.namelist())
    return [
        _err("entries", f"Missing required entry: {req}")
        for req in (CONTENT_TYPES_PART, main_part)
        if req not in names
    ]


def validate_xml(zf: zipfile.ZipFile) -> list[Issue]:
    """Parse every .xml / .rels entry to ensure well-formedness."""
    issues = []
    for name in zf.namelist():
        if not name.endswith((".xml", ".rels")):
            continue
        try:
            ET.fromstring(decode_part(zf.read(name)))
        except ET.ParseError as e:
            issues.append(_err("xml", f"{name}: {e}"))
    return issues


def validate_structure(zf: zipfile.ZipFile, main_part: str = MAIN_PART) -> list[Issue]:
    """Verify the main part has a w:document root and a w:body child."""
    if main_part not in zf.namelist():
        return []
    try:
        root = ET.fromstring(decode_part(zf.read(main_part)))
    except ET.ParseError:
        return []  # Already reported by validate_xml

    issues = []
    if root.tag != f"{{{W_NS}}}document":
        issues.append(_err("structure", f"Root element is '{root.tag}', expected w:document"))
    if root.find(f"{{{W_NS}}}body") is None:
        issues.append(_err("structure", "w:body element not found"))
    return issues


def validate_namespaces(zf: zipfile.ZipFile, main_part: str = MAIN_PART) -> list[Issue]:
    """Detect auto-generated namespace prefixes (ns0:, ns1:, ...)."""
    if main_part not in zf.namelist():
        return []
    content = decode_part(zf.read(main_part))
    matches = _RE_AUTO_NS.findall(content)
    if not matches:
        return []
    unique = sorted(set(matches))
    return [_warn(
        "namespace",
        f"Auto-generated namespace prefixes found: {', '.join(unique)} "
        f"({len(matches)} occurrences)",
    )]


def validate_content(
    zf: zipfile.ZipFile,
    expected_texts: Iterable[str],
    main_part: str = MAIN_PART,
) -> list[Issue]:
    """Warn about expected texts missing from the main part."""
    full_text = _extract_all_text(decode_part(zf.read(main_part)))
    return [
        _warn("content", f"Text not found in output: '{text[:60]}'")
        for text in expected_texts
        if text and text not in full_text
    ]


# -------------------------------------------------------------------
# Orchestrator
# -------------------------------------------------------------------

def validate(
    data: bytes,
    expected_texts: Iterable[str] | None = None,
    main_part: str = MAIN_PART,
) -> ValidationReport:
    """Run all validations over package bytes.

    Args:
        data: The .docx archive.
        expected_texts: Texts that must appear in the main part.
        main_part: Name of the main content part.

    Returns:
        A ValidationReport; content is only checked when the structure is sound.
    """
    report = ValidationReport()
    try:
        zf = zipfile.ZipFile(io.BytesIO(data), "r")
    except zipfile.BadZipFile as e:
        report.add(_err("zip", f"Invalid ZIP: {e}"))
        return report

    with zf:
        # Entries cannot be read once the archive itself is corrupt
        for issue in validate_zip(zf):
            report.add(issue)
        if not report.valid:
            return report

        issues = (
            validate_entries(zf, main_part)
            + validate_xml(zf)
            + validate_structure(zf, main_part)
            + validate_namespaces(zf, main_part)
        )
        for issue in issues:
            report.add(issue)

        if report.valid and expected_texts:
            for issue in validate_content(zf, expected_texts, main_part):
                report.add(issue)

    return report
