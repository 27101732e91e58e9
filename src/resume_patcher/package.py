"""Read, rewrite and repackage the parts of a DOCX zip archive.

A ``Package`` keeps every archive entry as raw bytes together with its
original ``ZipInfo``. Only parts replaced through ``set_part`` are
re-encoded on ``serialize``; everything else (media, theme, numbering,
relationships...) is written back byte-identical in the original entry order.
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib

from .errors import ErrorKind, FormatError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Part names
# ---------------------------------------------------------------------------
MAIN_PART = "word/document.xml"
STYLES_PART = "word/styles.xml"
NUMBERING_PART = "word/numbering.xml"
THEME_PART = "word/theme/theme1.xml"
DOCUMENT_RELS_PART = "word/_rels/document.xml.rels"
FONT_TABLE_PART = "word/fontTable.xml"
SETTINGS_PART = "word/settings.xml"
CONTENT_TYPES_PART = "[Content_Types].xml"
PACKAGE_RELS_PART = "_rels/.rels"

OPTIONAL_PARTS = (
    STYLES_PART,
    NUMBERING_PART,
    THEME_PART,
    DOCUMENT_RELS_PART,
    FONT_TABLE_PART,
    SETTINGS_PART,
)

# Failures zipfile raises while inflating a single damaged entry
_ENTRY_READ_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


def decode_part(raw: bytes) -> str:
    """Decode a part as UTF-8 (BOM tolerated), falling back to latin-1."""
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


class Package:
    """In-memory view of a zip-packaged word-processing document."""

    def __init__(
        self,
        parts: dict[str, bytes],
        infos: dict[str, zipfile.ZipInfo],
        main_part: str = MAIN_PART,
    ):
        self._parts = parts
        self._infos = infos
        self._dirty: set[str] = set()
        self.main_part = main_part

    # -------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------

    @classmethod
    def open(cls, data: bytes, main_part: str = MAIN_PART) -> "Package":
        """Load all entries of a DOCX archive.

        The main content part is mandatory. Any other entry that fails to
        read is logged and treated as absent.

        Args:
            data: Raw bytes of the .docx file. Never modified.
            main_part: Name of the mandatory main content part.

        Returns:
            A new Package.

        Raises:
            FormatError: MISSING_MAIN_PART if the bytes are not a zip archive
                or the main part is absent or unreadable.
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data), "r")
        except zipfile.BadZipFile as e:
            raise FormatError(ErrorKind.MISSING_MAIN_PART, f"not a zip archive: {e}") from e

        parts: dict[str, bytes] = {}
        infos: dict[str, zipfile.ZipInfo] = {}
        with archive:
            if main_part not in archive.namelist():
                raise FormatError(ErrorKind.MISSING_MAIN_PART, f"{main_part} not found")

            for info in archive.infolist():
                if info.is_dir():
                    continue
                try:
                    raw = archive.read(info)
                except _ENTRY_READ_ERRORS as e:
                    if info.filename == main_part:
                        raise FormatError(
                            ErrorKind.MISSING_MAIN_PART, f"{main_part} unreadable: {e}"
                        ) from e
                    logger.warning("Treating unreadable part %s as absent: %s", info.filename, e)
                    continue
                parts[info.filename] = raw
                infos[info.filename] = info

        package = cls(parts, infos, main_part=main_part)
        missing = package.missing_optional_parts()
        if missing:
            logger.debug("Optional parts absent: %s", ", ".join(missing))
        return package

    @property
    def part_names(self) -> list[str]:
        return list(self._parts)

    @property
    def dirty_parts(self) -> frozenset[str]:
        """Names of parts replaced since the package was opened."""
        return frozenset(self._dirty)

    def has_part(self, name: str) -> bool:
        return name in self._parts

    def get_part_bytes(self, name: str) -> bytes | None:
        return self._parts.get(name)

    def get_part(self, name: str) -> str | None:
        """Return a part decoded as text, or None when absent."""
        raw = self._parts.get(name)
        if raw is None:
            return None
        return decode_part(raw)

    def missing_optional_parts(self) -> list[str]:
        return [name for name in OPTIONAL_PARTS if name not in self._parts]

    # -------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------

    def set_part(self, name: str, text: str) -> None:
        """Replace (or add) a part with UTF-8 encoded text."""
        self._parts[name] = text.encode("utf-8")
        self._dirty.add(name)

    def serialize(self) -> bytes:
        """Write the package back to zip bytes.

        Preserves the original entry order and ZipInfo metadata. Parts that
        were never replaced are copied byte-identical; new parts are
        appended with deflate compression.

        Returns:
            The .docx archive as bytes.
        """
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as output_zip:
            for name, raw in self._parts.items():
                info = self._infos.get(name)
                if info is not None:
                    output_zip.writestr(info, raw)
                else:
                    output_zip.writestr(name, raw, compress_type=zipfile.ZIP_DEFLATED)
        return buffer.getvalue()
