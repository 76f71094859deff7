"""Shapes read from the ``shape { ... }`` chunks of a table description."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, Callable

from flipperkit.tokens import LoaderError, TokenReader


class ShapeProperty(IntFlag):
    """Rendering flags a shape may carry."""

    NONE = 0
    HIDDEN = 1
    BEHIND = 2
    BEHIND2 = 4
    ALWAYSLIT = 8
    USE_TRANS = 16
    ALPHATEST = 32
    SPECULAR = 64


@dataclass
class Vertex:
    """A vertex with its colour and texture coordinates."""

    x: float
    y: float
    z: float
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0
    u: float = 0.0
    v: float = 0.0


@dataclass
class Polygon:
    """A polygon given by indices into its shape's vertex list."""

    indices: list[int] = field(default_factory=list)
    transparent: bool = False


@dataclass
class Shape:
    """A mesh of vertices and polygons, optionally textured."""

    vertices: list[Vertex] = field(default_factory=list)
    polygons: list[Polygon] = field(default_factory=list)
    texture: Any = None
    properties: ShapeProperty = ShapeProperty.NONE


_FLAG_CHUNKS = {
    "hid": ShapeProperty.HIDDEN,
    "bhi": ShapeProperty.BEHIND,
    "bh2": ShapeProperty.BEHIND2,
    "lit": ShapeProperty.ALWAYSLIT,
}


def _next(reader: TokenReader) -> str:
    token = reader.next_word()
    if token is None:
        raise LoaderError("unexpected end of input inside shape", reader.line_number)
    return token


def _read_vertex(reader: TokenReader) -> Vertex:
    reader.expect("{")
    values = [reader.next_float() for _ in range(9)]
    reader.expect("}")
    return Vertex(*values)


def _read_polygon(reader: TokenReader, shape: Shape) -> Polygon:
    reader.expect("{")
    poly = Polygon()
    token = _next(reader)
    while token != "}":
        if token == "tpt":
            reader.skip_block()
            poly.transparent = True
            shape.properties |= ShapeProperty.USE_TRANS
        elif token == "ple":
            reader.expect("{")
            poly.indices.append(reader.next_int())
            reader.expect("}")
        else:
            reader.skip_block()
        token = _next(reader)
    return poly


def _read_texture(reader: TokenReader, load_texture: Callable[[str], Any]) -> Any:
    reader.expect("{")
    name = _next(reader)
    texture = load_texture(name)
    if texture is None:
        raise LoaderError(f"error loading texture: {name}", reader.line_number)
    reader.expect("}")
    return texture


def read_shape(reader: TokenReader, load_texture: Callable[[str], Any]) -> Shape:
    """Read the block following the word ``shape``.

    ``load_texture`` receives a texture file name and returns a texture,
    or None when it cannot be loaded. Unknown chunks are skipped.
    """
    shape = Shape()
    reader.expect("{")
    token = _next(reader)
    while token != "}":
        if token == "vtx":
            shape.vertices.append(_read_vertex(reader))
        elif token == "ply":
            shape.polygons.append(_read_polygon(reader, shape))
        elif token == "tex":
            shape.texture = _read_texture(reader, load_texture)
        elif token in _FLAG_CHUNKS:
            shape.properties |= _FLAG_CHUNKS[token]
            reader.skip_block()
        else:
            reader.skip_block()
        token = _next(reader)
    return shape