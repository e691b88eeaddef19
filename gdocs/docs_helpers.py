"""
Google Docs Helper Functions

Edit operation types and the Google Docs API request builders they render to.
Every request builder accepts an optional tab_id so the same operation can
target the default body or any tab.
"""
import logging
from typing import Dict, Any, Optional, Tuple, List, Union
from enum import Enum
from dataclasses import dataclass

from gdocs.docs_model import TextStyle, utf16_len

logger = logging.getLogger(__name__)


class OperationType(str, Enum):
    """Primitive edit operations understood by documents.batchUpdate."""
    INSERT_TEXT = "insert_text"
    DELETE_RANGE = "delete_range"
    SET_PARAGRAPH_STYLE = "set_paragraph_style"
    SET_TEXT_STYLE = "set_text_style"


@dataclass(frozen=True)
class InsertText:
    index: int
    text: str
    tab_id: Optional[str] = None

    type = OperationType.INSERT_TEXT

    @property
    def length(self) -> int:
        return utf16_len(self.text)

    def to_request(self) -> Dict[str, Any]:
        return create_insert_text_request(self.index, self.text, self.tab_id)


@dataclass(frozen=True)
class DeleteRange:
    start: int
    end: int
    tab_id: Optional[str] = None

    type = OperationType.DELETE_RANGE

    def to_request(self) -> Dict[str, Any]:
        return create_delete_range_request(self.start, self.end, self.tab_id)


@dataclass(frozen=True)
class SetParagraphStyle:
    start: int
    end: int
    style: str
    tab_id: Optional[str] = None

    type = OperationType.SET_PARAGRAPH_STYLE

    def to_request(self) -> Dict[str, Any]:
        return create_paragraph_style_request(self.start, self.end, self.style, self.tab_id)


@dataclass(frozen=True)
class SetTextStyle:
    """Text style over [start, end). A None style clears the inline Markdown attributes."""
    start: int
    end: int
    style: Optional[TextStyle]
    tab_id: Optional[str] = None

    type = OperationType.SET_TEXT_STYLE

    def to_request(self) -> Dict[str, Any]:
        return create_format_text_request(self.start, self.end, self.style, self.tab_id)


EditOperation = Union[InsertText, DeleteRange, SetParagraphStyle, SetTextStyle]

# Attributes the Markdown decoder can set; cleared on plain segments so they
# do not inherit the style of the text before them
INLINE_STYLE_FIELDS = ('bold', 'italic', 'strikethrough', 'weightedFontFamily')


def document_link(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


def calculate_position_shift(operations: List[EditOperation]) -> int:
    """Net change in document length caused by applying a batch of operations."""
    shift = 0
    for op in operations:
        if isinstance(op, InsertText):
            shift += op.length
        elif isinstance(op, DeleteRange):
            shift -= op.end - op.start
    return shift


def clamp_index(index: int, lower: int, upper: int) -> int:
    """Clamp an index into [lower, upper]. Out-of-range indices are moved, never rejected."""
    if upper < lower:
        upper = lower
    return max(lower, min(index, upper))


def _location(index: int, tab_id: Optional[str]) -> Dict[str, Any]:
    location: Dict[str, Any] = {'index': index}
    if tab_id:
        location['tabId'] = tab_id
    return location


def _range(start_index: int, end_index: int, tab_id: Optional[str]) -> Dict[str, Any]:
    range_obj: Dict[str, Any] = {'startIndex': start_index, 'endIndex': end_index}
    if tab_id:
        range_obj['tabId'] = tab_id
    return range_obj


def _parse_color(color_str: str) -> Dict[str, Any]:
    """
    Parse a color string (hex or named) to Google Docs API color format.

    Args:
        color_str: Color as hex (#FF0000, #F00) or CSS named color

    Returns:
        Dictionary with rgbColor format for Google Docs API
    """
    # Handle hex colors
    if color_str.startswith('#'):
        hex_color = color_str.lstrip('#')
        # Handle short hex (#F00 -> #FF0000)
        if len(hex_color) == 3:
            hex_color = ''.join(c*2 for c in hex_color)
        if len(hex_color) != 6:
            raise ValueError(f"Invalid hex color: {color_str}")
        r = int(hex_color[0:2], 16) / 255.0
        g = int(hex_color[2:4], 16) / 255.0
        b = int(hex_color[4:6], 16) / 255.0
        return {'color': {'rgbColor': {'red': r, 'green': g, 'blue': b}}}

    # Handle common named colors
    named_colors = {
        'red': (1.0, 0.0, 0.0),
        'green': (0.0, 1.0, 0.0),
        'blue': (0.0, 0.0, 1.0),
        'yellow': (1.0, 1.0, 0.0),
        'orange': (1.0, 0.65, 0.0),
        'purple': (0.5, 0.0, 0.5),
        'black': (0.0, 0.0, 0.0),
        'white': (1.0, 1.0, 1.0),
        'gray': (0.5, 0.5, 0.5),
        'grey': (0.5, 0.5, 0.5),
    }
    color_lower = color_str.lower()
    if color_lower in named_colors:
        r, g, b = named_colors[color_lower]
        return {'color': {'rgbColor': {'red': r, 'green': g, 'blue': b}}}

    raise ValueError(f"Unknown color format: {color_str}. Use hex (#FF0000) or named colors.")


def build_text_style(style: Optional[TextStyle]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Build text style object for Google Docs API requests.

    Args:
        style: The TextStyle to render; unset attributes are left out.
            None renders the reset form: an empty style over INLINE_STYLE_FIELDS,
            which clears those attributes back to the paragraph's defaults.

    Returns:
        Tuple of (text_style_dict, list_of_field_names)
    """
    if style is None:
        return {}, list(INLINE_STYLE_FIELDS)

    text_style = {}
    fields = []

    if style.bold is not None:
        text_style['bold'] = style.bold
        fields.append('bold')

    if style.italic is not None:
        text_style['italic'] = style.italic
        fields.append('italic')

    if style.underline is not None:
        text_style['underline'] = style.underline
        fields.append('underline')

    if style.strikethrough is not None:
        text_style['strikethrough'] = style.strikethrough
        fields.append('strikethrough')

    if style.font_size is not None:
        text_style['fontSize'] = {'magnitude': style.font_size, 'unit': 'PT'}
        fields.append('fontSize')

    if style.font_family is not None:
        text_style['weightedFontFamily'] = {'fontFamily': style.font_family}
        fields.append('weightedFontFamily')

    if style.foreground_color is not None:
        text_style['foregroundColor'] = _parse_color(style.foreground_color)
        fields.append('foregroundColor')

    if style.background_color is not None:
        text_style['backgroundColor'] = _parse_color(style.background_color)
        fields.append('backgroundColor')

    return text_style, fields


def create_insert_text_request(index: int, text: str, tab_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Create an insertText request for Google Docs API.

    Args:
        index: Position to insert text
        text: Text to insert
        tab_id: Optional tab to target

    Returns:
        Dictionary representing the insertText request
    """
    return {
        'insertText': {
            'location': _location(index, tab_id),
            'text': text
        }
    }


def create_delete_range_request(start_index: int, end_index: int, tab_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a deleteContentRange request for Google Docs API.

    Args:
        start_index: Start position of content to delete
        end_index: End position of content to delete
        tab_id: Optional tab to target

    Returns:
        Dictionary representing the deleteContentRange request
    """
    return {
        'deleteContentRange': {
            'range': _range(start_index, end_index, tab_id)
        }
    }


def create_format_text_request(
    start_index: int,
    end_index: int,
    style: Optional[TextStyle],
    tab_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Create an updateTextStyle request for Google Docs API.

    Returns:
        Dictionary representing the updateTextStyle request, or None if no styles provided
    """
    text_style, fields = build_text_style(style)

    if not fields:
        return None

    return {
        'updateTextStyle': {
            'range': _range(start_index, end_index, tab_id),
            'textStyle': text_style,
            'fields': ','.join(fields)
        }
    }


def create_paragraph_style_request(
    start_index: int,
    end_index: int,
    named_style_type: str,
    tab_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Create an updateParagraphStyle request setting the named style (HEADING_1, NORMAL_TEXT, ...)."""
    return {
        'updateParagraphStyle': {
            'range': _range(start_index, end_index, tab_id),
            'paragraphStyle': {'namedStyleType': named_style_type},
            'fields': 'namedStyleType'
        }
    }


def build_requests(operations: List[EditOperation]) -> List[Dict[str, Any]]:
    """Render operations to batchUpdate requests, dropping style updates that set nothing."""
    requests = []
    for op in operations:
        request = op.to_request()
        if request is not None:
            requests.append(request)
    return requests


def first_index(operations: List[EditOperation]) -> Optional[int]:
    """The first index a batch touches, reported when the batch is rejected."""
    if not operations:
        return None
    op = operations[0]
    return op.index if isinstance(op, InsertText) else op.start
