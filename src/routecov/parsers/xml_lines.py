"""Line-numbering XML reader.

``xml.etree.ElementTree`` drops source positions, so XML route files are
read through expat directly while an ElementTree ``TreeBuilder``
assembles the usual element tree. Each element's start and end lines are
kept in a side mapping.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO
from xml.parsers import expat


@dataclass
class LineNumberedDocument:
    """An element tree plus the line span of every element.

    Attributes:
        root: Document element.
        lines: Element -> (start line, end line), both 1-based.
    """

    root: ET.Element
    lines: dict[ET.Element, tuple[int, int]] = field(default_factory=dict)

    def span(self, element: ET.Element) -> tuple[int | None, int | None]:
        """Return the (start, end) lines of an element, or (None, None)."""
        return self.lines.get(element, (None, None))


def parse_xml_with_lines(file_path: Path) -> LineNumberedDocument:
    """Parse an XML file recording line numbers.

    Args:
        file_path: Path to the XML file.

    Returns:
        LineNumberedDocument for the file.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed.
        OSError: If the file cannot be read.
    """
    with open(file_path, "rb") as fh:
        return parse_xml_stream(fh)


def parse_xml_stream(stream: BinaryIO) -> LineNumberedDocument:
    """Parse XML from a binary stream recording line numbers.

    Args:
        stream: Readable binary file object.

    Returns:
        LineNumberedDocument for the stream.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is malformed.
    """
    builder = ET.TreeBuilder()
    parser = expat.ParserCreate()
    starts: dict[ET.Element, int] = {}
    lines: dict[ET.Element, tuple[int, int]] = {}

    def start(tag: str, attrs: dict[str, str]) -> None:
        element = builder.start(tag, attrs)
        starts[element] = parser.CurrentLineNumber

    def end(tag: str) -> None:
        element = builder.end(tag)
        lines[element] = (starts.pop(element), parser.CurrentLineNumber)

    parser.StartElementHandler = start
    parser.EndElementHandler = end
    parser.CharacterDataHandler = builder.data

    try:
        parser.ParseFile(stream)
    except expat.ExpatError as e:
        raise ET.ParseError(str(e)) from e

    return LineNumberedDocument(root=builder.close(), lines=lines)
