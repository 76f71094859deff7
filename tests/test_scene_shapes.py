import pytest

from flipperkit.scene_shapes import Polygon, ShapeProperty, Vertex, read_shape
from flipperkit.tokens import LoaderError, TokenReader

SHAPE_TEXT = """
{
  vtx { 1 2 3 0.5 0.25 1 1 0 1 }
  vtx { 4 5 6 1 1 1 1 1 0 }
  vtx { 7 8 9 1 1 1 1 1 1 }
  ply {
    pes { 3 }
    ple { 0 }
    ple { 1 }
    ple { 2 }
  }
  ply {
    tpt { }
    ple { 2 }
    ple { 0 }
  }
  tex { wood.png }
  hid { }
  lit { }
  xyz { nested { 1 2 } }
}
after
"""


def _no_texture(name):
    return None


def test_reads_vertices_polygons_and_flags():
    loaded = []

    def load(name):
        loaded.append(name)
        return "tex:" + name

    reader = TokenReader(SHAPE_TEXT)
    shape = read_shape(reader, load)
    assert shape.vertices[0] == Vertex(1, 2, 3, 0.5, 0.25, 1, 1, 0, 1)
    assert len(shape.vertices) == 3
    assert shape.polygons == [Polygon([0, 1, 2], False), Polygon([2, 0], True)]
    assert loaded == ["wood.png"]
    assert shape.texture == "tex:wood.png"
    assert shape.properties & ShapeProperty.HIDDEN
    assert shape.properties & ShapeProperty.ALWAYSLIT
    assert shape.properties & ShapeProperty.USE_TRANS
    assert not shape.properties & ShapeProperty.BEHIND
    assert reader.next_word() == "after"


def test_missing_texture_raises():
    reader = TokenReader("{ tex { missing.png } }")
    with pytest.raises(LoaderError):
        read_shape(reader, _no_texture)


def test_requires_opening_brace():
    with pytest.raises(LoaderError):
        read_shape(TokenReader("vtx { 1 2 3 }"), _no_texture)


def test_unterminated_shape_raises():
    with pytest.raises(LoaderError):
        read_shape(TokenReader("{ vtx { 1 2 3 1 1 1 1 0 0 }"), _no_texture)


def test_empty_shape():
    shape = read_shape(TokenReader("{ }"), _no_texture)
    assert shape.vertices == [] and shape.polygons == []
    assert shape.properties == ShapeProperty.NONE