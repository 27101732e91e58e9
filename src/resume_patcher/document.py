"""Paragraph/run model over the main content part of a DOCX package.

The tree wraps ``xml.etree.ElementTree`` elements. Body children are tagged
as ``Paragraph`` or ``OpaqueBlock``; every ``w:p`` in the document (including
paragraphs nested in tables, content controls and text boxes) is indexed in
document order, and its position in ``DocumentTree.paragraphs`` is its handle.
Clones are detached until inserted, and receive fresh handles on insertion.
"""

from __future__ import annotations

import copy
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Union
from xml.etree import ElementTree as ET

from .errors import ErrorKind, FormatError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# OOXML namespaces
# ---------------------------------------------------------------------------
NAMESPACES = {
    "w": "http://schemas.openxmlformats.org/wordprocessingml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "m": "http://schemas.openxmlformats.org/officeDocument/2006/math",
    "mc": "http://schemas.openxmlformats.org/markup-compatibility/2006",
    "o": "urn:schemas-microsoft-com:office:office",
    "v": "urn:schemas-microsoft-com:vml",
    "w10": "urn:schemas-microsoft-com:office:word",
    "wp": "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing",
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "pic": "http://schemas.openxmlformats.org/drawingml/2006/picture",
    "wp14": "http://schemas.microsoft.com/office/word/2010/wordprocessingDrawing",
    "w14": "http://schemas.microsoft.com/office/word/2010/wordml",
    "w15": "http://schemas.microsoft.com/office/word/2012/wordml",
    "wps": "http://schemas.microsoft.com/office/word/2010/wordprocessingShape",
    "wpg": "http://schemas.microsoft.com/office/word/2010/wordprocessingGroup",
}
W_NS = NAMESPACES["w"]
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Register prefixes so ET output uses w: / r: instead of ns0: / ns1:
for _pfx, _uri in NAMESPACES.items():
    ET.register_namespace(_pfx, _uri)

# Prefix -> URI bindings registered so far; never rebound
_known_namespaces = dict(NAMESPACES)

_P = f"{{{W_NS}}}p"
_R = f"{{{W_NS}}}r"
_T = f"{{{W_NS}}}t"
_PPR = f"{{{W_NS}}}pPr"
_RPR = f"{{{W_NS}}}rPr"
_BODY = f"{{{W_NS}}}body"
_PSTYLE = f"{{{W_NS}}}pStyle"
_VAL = f"{{{W_NS}}}val"

_RE_AUTO_PREFIX = re.compile(r"ns\d+$")
_RE_BODY = re.compile(r"(<w:body[^>]*>)[\s\S]*?(</w:body>)")


# ===================================================================
# Node kinds
# ===================================================================

@dataclass(eq=False)
class Run:
    """A ``w:r`` element: optional run properties and a text fragment."""

    element: ET.Element

    @property
    def properties(self) -> ET.Element | None:
        return self.element.find(_RPR)

    @property
    def text(self) -> str:
        return "".join(t.text or "" for t in self.element.iter(_T))


@dataclass(eq=False)
class Paragraph:
    """A ``w:p`` element and the container it lives in (None when detached)."""

    element: ET.Element
    parent: ET.Element | None = None

    @property
    def properties(self) -> ET.Element | None:
        return self.element.find(_PPR)

    @property
    def runs(self) -> list[Run]:
        return [Run(r) for r in self.element.iter(_R)]

    @property
    def text(self) -> str:
        return paragraph_text(self)

    @property
    def style_id(self) -> str | None:
        """Value of ``w:pPr/w:pStyle/@w:val``, if any."""
        ppr = self.properties
        if ppr is None:
            return None
        pstyle = ppr.find(_PSTYLE)
        if pstyle is None:
            return None
        return pstyle.get(_VAL)

    @property
    def attached(self) -> bool:
        return self.parent is not None


@dataclass(eq=False)
class OpaqueBlock:
    """Any body-level element that is not a paragraph (tables, sectPr, sdt...)."""

    element: ET.Element

    @property
    def tag(self) -> str:
        return self.element.tag


Block = Union[Paragraph, OpaqueBlock]


# ===================================================================
# Text and mutation helpers
# ===================================================================

def paragraph_text(paragraph: Paragraph) -> str:
    """Concatenate every ``w:t`` under the paragraph, in document order."""
    texts = []
    for t in paragraph.element.iter(_T):
        if t.text:
            texts.append(t.text)
    return "".join(texts)


def clone_paragraph(paragraph: Paragraph) -> Paragraph:
    """Deep-copy a paragraph. The clone is detached and shares no elements."""
    return Paragraph(copy.deepcopy(paragraph.element))


def _build_run(text: str, rpr: ET.Element | None) -> ET.Element:
    run = ET.Element(_R)
    if rpr is not None:
        run.append(copy.deepcopy(rpr))
    t_elem = ET.SubElement(run, _T)
    t_elem.text = text
    if text.startswith(" ") or text.endswith(" "):
        t_elem.set(XML_SPACE, "preserve")
    return run


def set_paragraph_text(paragraph: Paragraph, text: str) -> None:
    """Replace the paragraph content with a single run carrying ``text``.

    The new run inherits the run properties of the first original run (none
    if the paragraph had no run). ``w:pPr`` is kept untouched; every other
    child (runs, hyperlinks, bookmarks, proofing marks) is removed.
    """
    element = paragraph.element
    first_run = next(element.iter(_R), None)
    rpr = first_run.find(_RPR) if first_run is not None else None
    new_run = _build_run(text, rpr)

    ppr = element.find(_PPR)
    for child in list(element):
        if child is not ppr:
            element.remove(child)
    element.append(new_run)


# ===================================================================
# Document tree
# ===================================================================

@dataclass(eq=False)
class DocumentTree:
    """Parsed main content part."""

    root: ET.Element
    body: ET.Element
    blocks: list[Block] = field(default_factory=list, init=False)
    paragraphs: list[Paragraph] = field(default_factory=list, init=False)
    _wrappers: dict = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._reindex()

    def _reindex(self) -> None:
        parents = {child: parent for parent in self.root.iter() for child in parent}
        wrappers: dict[ET.Element, Paragraph] = {}
        paragraphs = []
        for p_elem in self.root.iter(_P):
            para = self._wrappers.get(p_elem) or Paragraph(p_elem)
            para.parent = parents.get(p_elem)
            wrappers[p_elem] = para
            paragraphs.append(para)
        self._wrappers = wrappers
        self.paragraphs = paragraphs
        self.blocks = [
            wrappers[child] if child.tag == _P else OpaqueBlock(child)
            for child in self.body
        ]

    # -------------------------------------------------------------------
    # Handles and traversal
    # -------------------------------------------------------------------

    def index(self, paragraph: Paragraph) -> int:
        """Return the handle (document-order index) of an attached paragraph."""
        for i, para in enumerate(self.paragraphs):
            if para is paragraph:
                return i
        raise ValueError("Paragraph is not part of this document")

    def paragraph(self, handle: int) -> Paragraph:
        return self.paragraphs[handle]

    def paragraphs_in(self, container: ET.Element) -> list[Paragraph]:
        """All paragraphs under ``container``, in document order."""
        members = set(container.iter(_P))
        return [p for p in self.paragraphs if p.element in members]

    # -------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------

    def _splice(self, anchor: Paragraph, fragment: Iterable[Paragraph], offset: int) -> None:
        if anchor.parent is None or self._wrappers.get(anchor.element) is not anchor:
            raise ValueError("Anchor paragraph is not part of this document")
        fragment = list(fragment)
        for para in fragment:
            if para.attached:
                raise ValueError("Cannot insert a paragraph that is already attached")

        parent = anchor.parent
        position = list(parent).index(anchor.element) + offset
        for i, para in enumerate(fragment):
            parent.insert(position + i, para.element)
            para.parent = parent
            self._wrappers[para.element] = para
        self._reindex()

    def insert_before(self, anchor: Paragraph, fragment: Iterable[Paragraph]) -> None:
        """Insert detached paragraphs, in order, immediately before ``anchor``."""
        self._splice(anchor, fragment, 0)

    def insert_after(self, anchor: Paragraph, fragment: Iterable[Paragraph]) -> None:
        """Insert detached paragraphs, in order, immediately after ``anchor``."""
        self._splice(anchor, fragment, 1)

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------

    def body_xml(self) -> str:
        return "".join(ET.tostring(child, encoding="unicode") for child in self.body)

    def to_xml(self, original_xml: str | None = None) -> str:
        """Serialize the document.

        When the original part text is given, only the ``w:body`` content is
        replaced in it so the root element (namespace declarations,
        ``mc:Ignorable``) stays byte-identical.

        Args:
            original_xml: Original document.xml content.

        Returns:
            Complete document.xml content string.
        """
        if original_xml is not None:
            match = _RE_BODY.search(original_xml)
            if match:
                prefix = original_xml[:match.start(1)]
                body_open = match.group(1)
                body_close = match.group(2)
                suffix = original_xml[match.end(2):]
                return f"{prefix}{body_open}{self.body_xml()}{body_close}{suffix}"
            logger.warning("No <w:body> tag in original text; serializing full tree")

        return XML_DECLARATION + ET.tostring(self.root, encoding="unicode")


# ===================================================================
# Parsing
# ===================================================================

def _register_document_namespaces(xml_text: str) -> None:
    """Register prefixes the document declares that are not known yet.

    The ElementTree prefix map is process-wide, so a binding is only added
    when both its prefix and its URI are unmapped. The first binding wins:
    a document that rebinds a known prefix is written with the known one.
    """
    for _event, (prefix, uri) in ET.iterparse(io.StringIO(xml_text), events=("start-ns",)):
        if not prefix or _RE_AUTO_PREFIX.match(prefix):
            continue
        if _known_namespaces.get(prefix) == uri:
            continue
        if prefix in _known_namespaces or uri in _known_namespaces.values():
            logger.debug("Namespace binding %s=%s conflicts with a registered one; skipped", prefix, uri)
            continue
        _known_namespaces[prefix] = uri
        ET.register_namespace(prefix, uri)


def parse(xml_text: str) -> DocumentTree:
    """Parse the main content part into a DocumentTree.

    Args:
        xml_text: document.xml content.

    Returns:
        A DocumentTree.

    Raises:
        FormatError: MALFORMED_XML on unparsable input or a missing w:body.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise FormatError(ErrorKind.MALFORMED_XML, str(e)) from e

    body = root.find(_BODY)
    if body is None:
        raise FormatError(ErrorKind.MALFORMED_XML, "w:body element not found")

    # Only accepted documents may add prefixes
    _register_document_namespaces(xml_text)

    tree = DocumentTree(root=root, body=body)
    logger.debug(
        "Parsed document: %d body blocks, %d paragraphs",
        len(tree.blocks), len(tree.paragraphs),
    )
    return tree
