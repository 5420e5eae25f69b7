"""
Standard .map file parser (Quake / TrenchBroom family).

Reads the text format:

    // comment
    {
    "classname" "worldspawn"
    {
    ( x1 y1 z1 ) ( x2 y2 z2 ) ( x3 y3 z3 ) TEXTURE xoff yoff rot xscale yscale
    ...
    }
    }

``//`` comments may appear anywhere whitespace may.  Errors raise
MapParseError carrying the line, column and the grammar rule that failed.

Usage::

    from brushgeom.conversion.map_parser import parse_map

    game_map = parse_map(text)
    for entity in game_map.entities:
        print(entity.classname, len(entity.brushes))
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from brushgeom.conversion.map_writer import Brush, Entity, Map
from brushgeom.conversion.plane_math import Plane, Vec3

logger = logging.getLogger(__name__)


_WS_RE = re.compile(r"(?:\s+|//[^\n]*)*")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?(?![\w.])")
_STRING_RE = re.compile(r'"([^"]*)"')
_TEXTURE_RE = re.compile(r'[^\s()}"][^\s]*')


class MapParseError(ValueError):
    """Raised when MAP text does not follow the grammar.

    Attributes:
        rule: Grammar rule being parsed when the error occurred
        expected: Description of what the parser wanted
        offset: Character offset into the text
        line: 1-based line number
        column: 1-based column number
        context: The offending source line
    """

    def __init__(self, rule: str, expected: str, text: str, offset: int):
        self.rule = rule
        self.expected = expected
        self.offset = offset
        self.line = text.count("\n", 0, offset) + 1
        line_start = text.rfind("\n", 0, offset) + 1
        line_end = text.find("\n", offset)
        if line_end == -1:
            line_end = len(text)
        self.column = offset - line_start + 1
        self.context = text[line_start:line_end]

        found = text[offset:offset + 12] if offset < len(text) else "end of input"
        pointer = " " * (self.column - 1) + "^"
        super().__init__(
            f"line {self.line}, column {self.column}: in {rule}: "
            f"expected {expected}, found {found!r}\n"
            f"{self.context}\n{pointer}"
        )


class MapParser:
    """
    Recursive descent parser for standard MAP text.

    Each ``_parse_*`` method consumes one grammar rule starting at
    ``self.pos`` and leaves ``self.pos`` after any trailing whitespace.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Map:
        self._skip_ws()
        entities: List[Entity] = []
        while not self._at_end():
            if self._peek() != "{":
                self._fail("map", "'{' to start an entity")
            entities.append(self._parse_entity())

        logger.debug(
            "Parsed %d entities, %d brushes",
            len(entities), sum(len(e.brushes) for e in entities),
        )
        return Map(entities=entities)

    # ---------------------------------------------------------------
    # Grammar rules
    # ---------------------------------------------------------------

    def _parse_entity(self) -> Entity:
        self._expect("{", "entity")
        properties: Dict[str, str] = {}
        brushes: List[Brush] = []

        while True:
            c = self._peek()
            if c == "}":
                break
            if c == '"':
                key, value = self._parse_property()
                properties[key] = value
            elif c == "{":
                brushes.append(self._parse_brush())
            else:
                self._fail("entity", "a quoted property, '{' to start a brush, or '}'")

        self._expect("}", "entity")
        return Entity(properties=properties, brushes=brushes)

    def _parse_property(self) -> Tuple[str, str]:
        key = self._parse_string("property")
        value = self._parse_string("property")
        return key, value

    def _parse_brush(self) -> Brush:
        self._expect("{", "brush")
        planes: List[Plane] = []
        while self._peek() == "(":
            planes.append(self._parse_plane())
        if self._peek() != "}":
            self._fail("brush", "'(' to start a plane or '}'")
        self._expect("}", "brush")
        return Brush(planes=planes)

    def _parse_plane(self) -> Plane:
        p1 = self._parse_point()
        p2 = self._parse_point()
        p3 = self._parse_point()
        texture = self._parse_texture()
        x_offset = self._parse_number("plane")
        y_offset = self._parse_number("plane")
        rotation = self._parse_number("plane")
        x_scale = self._parse_number("plane")
        y_scale = self._parse_number("plane")
        return Plane(p1, p2, p3, texture, x_offset, y_offset, rotation, x_scale, y_scale)

    def _parse_point(self) -> Vec3:
        self._expect("(", "point")
        x = self._parse_number("point")
        y = self._parse_number("point")
        z = self._parse_number("point")
        self._expect(")", "point")
        return (x, y, z)

    # ---------------------------------------------------------------
    # Terminals
    # ---------------------------------------------------------------

    def _parse_number(self, rule: str) -> float:
        m = _FLOAT_RE.match(self.text, self.pos)
        if not m:
            self._fail(rule, "a number")
        self.pos = m.end()
        self._skip_ws()
        return float(m.group(0))

    def _parse_string(self, rule: str) -> str:
        m = _STRING_RE.match(self.text, self.pos)
        if not m:
            self._fail(rule, "a double-quoted string")
        self.pos = m.end()
        self._skip_ws()
        return m.group(1)

    def _parse_texture(self) -> str:
        m = _TEXTURE_RE.match(self.text, self.pos)
        if not m:
            self._fail("plane", "a texture name")
        self.pos = m.end()
        self._skip_ws()
        return m.group(0)

    def _expect(self, char: str, rule: str) -> None:
        if self._peek() != char:
            self._fail(rule, repr(char))
        self.pos += 1
        self._skip_ws()

    # ---------------------------------------------------------------
    # Cursor helpers
    # ---------------------------------------------------------------

    def _skip_ws(self) -> None:
        self.pos = _WS_RE.match(self.text, self.pos).end()

    def _peek(self) -> Optional[str]:
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _fail(self, rule: str, expected: str):
        raise MapParseError(rule, expected, self.text, self.pos)


def parse_map(text: str) -> Map:
    """Parse MAP text into a Map.

    Raises:
        MapParseError: On malformed input, with line/column and rule name
    """
    return MapParser(text).parse()
