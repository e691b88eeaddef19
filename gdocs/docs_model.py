"""
Google Docs Content Tree Model

Typed representation of a document's structural content: paragraphs made of
text runs, tables whose cells hold nested content, and opaque elements
(section breaks, tables of contents) that occupy index space without text.

Raw Docs API payloads are converted once, at the edge, by parse_document();
everything downstream works with these classes and dispatches through an
ElementVisitor instead of probing dictionary keys.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Every addressable offset in a body or tab starts here
FIRST_INDEX = 1

# Length charged for elements that hold no text
OPAQUE_ELEMENT_LENGTH = 1

NORMAL_TEXT = "NORMAL_TEXT"

_BOOL_FIELDS = ("bold", "italic", "underline", "strikethrough")
_STR_FIELDS = ("font_family", "foreground_color", "background_color")


def utf16_len(text: str) -> int:
    """Length of text in UTF-16 code units, the unit the Docs API indexes in."""
    return len(text.encode("utf-16-le")) // 2


def _rgb_to_hex(color: Dict[str, Any]) -> Optional[str]:
    rgb = color.get("color", {}).get("rgbColor")
    if rgb is None:
        return None
    return "#{:02X}{:02X}{:02X}".format(
        round(rgb.get("red", 0.0) * 255),
        round(rgb.get("green", 0.0) * 255),
        round(rgb.get("blue", 0.0) * 255),
    )


@dataclass(frozen=True)
class TextStyle:
    """Inline character style of a text run. None means 'not set'."""

    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strikethrough: Optional[bool] = None
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    foreground_color: Optional[str] = None
    background_color: Optional[str] = None

    @classmethod
    def from_api(cls, text_style: Dict[str, Any]) -> "TextStyle":
        font_size = text_style.get("fontSize", {}).get("magnitude")
        font_family = text_style.get("weightedFontFamily", {}).get("fontFamily")
        foreground = text_style.get("foregroundColor")
        background = text_style.get("backgroundColor")
        return cls(
            bold=text_style.get("bold"),
            italic=text_style.get("italic"),
            underline=text_style.get("underline"),
            strikethrough=text_style.get("strikethrough"),
            font_size=font_size,
            font_family=font_family,
            foreground_color=_rgb_to_hex(foreground) if foreground else None,
            background_color=_rgb_to_hex(background) if background else None,
        )

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> Optional["TextStyle"]:
        """Build a style from snake_case keys, as tools receive it. Unknown keys are rejected."""
        if not values:
            return None
        unknown = set(values) - set(cls.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown text style fields: {', '.join(sorted(unknown))}")
        for name, value in values.items():
            if value is None:
                continue
            if name in _BOOL_FIELDS and not isinstance(value, bool):
                raise TypeError(f"{name} must be true or false, got {value!r}")
            if name == "font_size" and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise TypeError(f"font_size must be a number, got {value!r}")
            if name in _STR_FIELDS and not isinstance(value, str):
                raise TypeError(f"{name} must be a string, got {value!r}")
        return cls(**values)

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in self.__dataclass_fields__
            if getattr(self, name) is not None
        }


@dataclass(frozen=True)
class ParagraphStyle:
    named_style_type: str = NORMAL_TEXT
    heading_id: Optional[str] = None


@dataclass
class TextRun:
    text: str
    style: TextStyle = field(default_factory=TextStyle)
    start_index: Optional[int] = None
    end_index: Optional[int] = None


class ElementVisitor(Generic[T]):
    """
    Visitor over the closed set of structural element kinds.

    Subclasses must handle all three kinds; the base raises so a missing
    handler fails loudly instead of silently skipping content.
    """

    def visit_paragraph(self, paragraph: "Paragraph") -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle paragraphs")

    def visit_table(self, table: "Table") -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle tables")

    def visit_opaque(self, element: "OpaqueElement") -> T:
        raise NotImplementedError(f"{type(self).__name__} does not handle opaque elements")


@dataclass
class Paragraph:
    runs: List[TextRun] = field(default_factory=list)
    style: ParagraphStyle = field(default_factory=ParagraphStyle)
    start_index: Optional[int] = None
    end_index: Optional[int] = None

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def accept(self, visitor: ElementVisitor[T]) -> T:
        return visitor.visit_paragraph(self)


@dataclass
class TableCell:
    content: List["StructuralElement"] = field(default_factory=list)


@dataclass
class TableRow:
    cells: List[TableCell] = field(default_factory=list)


@dataclass
class Table:
    rows: List[TableRow] = field(default_factory=list)
    start_index: Optional[int] = None
    end_index: Optional[int] = None

    def accept(self, visitor: ElementVisitor[T]) -> T:
        return visitor.visit_table(self)


@dataclass
class OpaqueElement:
    """An element with no text of its own, e.g. 'sectionBreak' or 'tableOfContents'."""

    kind: str
    start_index: Optional[int] = None
    end_index: Optional[int] = None

    def accept(self, visitor: ElementVisitor[T]) -> T:
        return visitor.visit_opaque(self)


StructuralElement = Union[Paragraph, Table, OpaqueElement]


@dataclass
class Tab:
    tab_id: str
    title: str
    content: List[StructuralElement] = field(default_factory=list)
    children: List["Tab"] = field(default_factory=list)
    nesting_level: int = 0


@dataclass
class ContentTree:
    """A read snapshot of one document, valid for the duration of one request."""

    document_id: str
    title: str
    content: List[StructuralElement] = field(default_factory=list)
    tabs: List[Tab] = field(default_factory=list)
    revision_id: Optional[str] = None


def _parse_text_run(element: Dict[str, Any]) -> Optional[TextRun]:
    text_run = element.get("textRun")
    if text_run is None:
        return None
    return TextRun(
        text=text_run.get("content", ""),
        style=TextStyle.from_api(text_run.get("textStyle", {})),
        start_index=element.get("startIndex"),
        end_index=element.get("endIndex"),
    )


def _parse_paragraph(element: Dict[str, Any]) -> Paragraph:
    paragraph = element["paragraph"]
    style = paragraph.get("paragraphStyle", {})
    runs = []
    for para_elem in paragraph.get("elements", []):
        run = _parse_text_run(para_elem)
        if run is not None:
            runs.append(run)
    return Paragraph(
        runs=runs,
        style=ParagraphStyle(
            named_style_type=style.get("namedStyleType", NORMAL_TEXT),
            heading_id=style.get("headingId"),
        ),
        start_index=element.get("startIndex"),
        end_index=element.get("endIndex"),
    )


def _parse_table(element: Dict[str, Any]) -> Table:
    rows = []
    for row in element["table"].get("tableRows", []):
        cells = [
            TableCell(content=parse_structural_elements(cell.get("content", [])))
            for cell in row.get("tableCells", [])
        ]
        rows.append(TableRow(cells=cells))
    return Table(
        rows=rows,
        start_index=element.get("startIndex"),
        end_index=element.get("endIndex"),
    )


def _parse_opaque(element: Dict[str, Any]) -> OpaqueElement:
    kinds = [key for key in element if key not in ("startIndex", "endIndex")]
    start_index = element.get("startIndex")
    # The API omits startIndex when it is 0 (the leading section break)
    if start_index is None and "endIndex" in element:
        start_index = 0
    return OpaqueElement(
        kind=kinds[0] if kinds else "unknown",
        start_index=start_index,
        end_index=element.get("endIndex"),
    )


def parse_structural_elements(content: List[Dict[str, Any]]) -> List[StructuralElement]:
    """
    Convert a raw 'content' array from the Docs API into structural elements.

    Args:
        content: The body/cell/tab content array

    Returns:
        List of Paragraph, Table and OpaqueElement instances in document order
    """
    elements: List[StructuralElement] = []
    for element in content:
        if "paragraph" in element:
            elements.append(_parse_paragraph(element))
        elif "table" in element:
            elements.append(_parse_table(element))
        else:
            elements.append(_parse_opaque(element))
    return elements


def _parse_tab(tab: Dict[str, Any], nesting_level: int = 0) -> Tab:
    props = tab.get("tabProperties", {})
    body = tab.get("documentTab", {}).get("body", {})
    return Tab(
        tab_id=props.get("tabId", ""),
        title=props.get("title", ""),
        content=parse_structural_elements(body.get("content", [])),
        children=[_parse_tab(child, nesting_level + 1) for child in tab.get("childTabs", [])],
        nesting_level=nesting_level,
    )


def parse_document(doc_data: Dict[str, Any]) -> ContentTree:
    """
    Convert a documents.get payload (fetched with includeTabsContent=True) into a ContentTree.

    The root body is taken from the legacy 'body' field when present, otherwise
    from the first tab, so callers always have a default body to work with.
    """
    tabs = [_parse_tab(tab) for tab in doc_data.get("tabs", [])]
    if "body" in doc_data:
        content = parse_structural_elements(doc_data["body"].get("content", []))
    elif tabs:
        content = tabs[0].content
    else:
        content = []
    return ContentTree(
        document_id=doc_data.get("documentId", ""),
        title=doc_data.get("title", ""),
        content=content,
        tabs=tabs,
        revision_id=doc_data.get("revisionId"),
    )
