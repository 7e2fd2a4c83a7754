import os

import pytest

from spritepack.errors import FileOpenError, InvalidFileFormatError, InvalidXmlError
from spritepack.model import Atlas, Frame, Rect
from spritepack.serializer import (
    AtlasSerializer,
    Sol2dAtlasSerializer,
    make_default_frame_name,
    make_texture_relative_path,
)


def _sample_atlas(tmp_path):
    return Atlas(
        texture=str(tmp_path / "atlas.png"),
        frames=[
            Frame(Rect(0, 0, 10, 20), Rect(1, 2, 10, 20), "hero", False),
            Frame(Rect(10, 0, 20, 10), Rect(0, 0, 10, 20), "enemy", True),
        ],
    )


def _write(tmp_path, text):
    path = tmp_path / "data.xml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_default_frame_name():
    assert make_default_frame_name(Atlas(texture="/x/atlas.png"), 1) == "atlas_0001.png"


def test_default_frame_name_uses_first_dot_for_base():
    name = make_default_frame_name(Atlas(texture="sheet.big.png"), 12)
    assert name.startswith("sheet_")
    assert name.endswith(".png")
    assert "0012" in name


def test_texture_relative_path_same_directory(tmp_path):
    atlas = Atlas(texture=str(tmp_path / "atlas.png"))
    assert make_texture_relative_path(atlas, str(tmp_path / "atlas.xml")) == "atlas.png"


def test_texture_relative_path_subdirectory(tmp_path):
    atlas = Atlas(texture=str(tmp_path / "img" / "a.png"))
    result = make_texture_relative_path(atlas, str(tmp_path / "a.xml"))
    assert result.replace("\\", "/") == "img/a.png"


def test_default_extension():
    assert Sol2dAtlasSerializer().default_file_extension == "xml"


def test_base_is_abstract():
    with pytest.raises(TypeError):
        AtlasSerializer()


def test_round_trip(tmp_path):
    atlas = _sample_atlas(tmp_path)
    file = str(tmp_path / "atlas.xml")
    serializer = Sol2dAtlasSerializer()
    serializer.serialize(atlas, file)
    loaded = serializer.deserialize(file)
    assert os.path.normpath(loaded.texture) == os.path.normpath(atlas.texture)
    assert loaded.frames == atlas.frames


def test_serialized_document_contents(tmp_path):
    atlas = _sample_atlas(tmp_path)
    file = tmp_path / "atlas.xml"
    Sol2dAtlasSerializer().serialize(atlas, str(file))
    text = file.read_text(encoding="utf-8")
    assert text.startswith("<?xml")
    assert 'texture="atlas.png"' in text
    assert text.count("<frame ") == 2
    assert text.count('rotated="true"') == 1


def test_unnamed_frames_get_default_names(tmp_path):
    atlas = Atlas(texture=str(tmp_path / "atlas.png"), frames=[Frame(), Frame()])
    file = str(tmp_path / "atlas.xml")
    serializer = Sol2dAtlasSerializer()
    serializer.serialize(atlas, file)
    loaded = serializer.deserialize(file)
    assert [f.name for f in loaded.frames] == [
        make_default_frame_name(atlas, 1),
        make_default_frame_name(atlas, 2),
    ]


def test_empty_atlas_round_trip(tmp_path):
    atlas = Atlas(texture=str(tmp_path / "atlas.png"))
    file = str(tmp_path / "atlas.xml")
    serializer = Sol2dAtlasSerializer()
    serializer.serialize(atlas, file)
    assert serializer.deserialize(file).frames == []


def test_special_characters_in_name_round_trip(tmp_path):
    atlas = Atlas(
        texture=str(tmp_path / "atlas.png"),
        frames=[Frame(Rect(0, 0, 1, 1), Rect(0, 0, 1, 1), 'a<b>&"c"', False)],
    )
    file = str(tmp_path / "atlas.xml")
    serializer = Sol2dAtlasSerializer()
    serializer.serialize(atlas, file)
    assert serializer.deserialize(file).frames[0].name == 'a<b>&"c"'


def test_relative_texture_resolved_against_file_directory(tmp_path):
    file = _write(tmp_path, '<atlas texture="img/t.png"/>')
    loaded = Sol2dAtlasSerializer().deserialize(file)
    assert os.path.normpath(loaded.texture) == os.path.normpath(str(tmp_path / "img" / "t.png"))


def test_rotated_is_case_insensitive(tmp_path):
    file = _write(
        tmp_path,
        '<atlas texture="t.png"><frame tx="1" ty="2" tw="3" th="4" sx="5" sy="6" sw="7" sh="8"'
        ' rotated="TRUE"/></atlas>',
    )
    frame = Sol2dAtlasSerializer().deserialize(file).frames[0]
    assert frame.is_rotated is True
    assert frame.texture_rect == Rect(1, 2, 3, 4)
    assert frame.sprite_rect == Rect(5, 6, 7, 8)
    assert frame.name == ""


def test_missing_attribute(tmp_path):
    file = _write(
        tmp_path,
        '<atlas texture="t.png"><frame tx="1" ty="2" tw="3" th="4" sx="5" sy="6" sw="7"/></atlas>',
    )
    with pytest.raises(InvalidFileFormatError) as info:
        Sol2dAtlasSerializer().deserialize(file)
    assert 'must contain attribute "sh"' in str(info.value)
    assert "position 1" in str(info.value)


def test_non_integer_attribute(tmp_path):
    file = _write(
        tmp_path,
        '<atlas texture="t.png">'
        '<frame tx="1" ty="2" tw="3" th="4" sx="5" sy="6" sw="7" sh="8"/>'
        '<frame tx="x" ty="2" tw="3" th="4" sx="5" sy="6" sw="7" sh="8"/></atlas>',
    )
    with pytest.raises(InvalidFileFormatError) as info:
        Sol2dAtlasSerializer().deserialize(file)
    assert 'The XML attribute "tx"' in str(info.value)
    assert "position 2" in str(info.value)


def test_wrong_root_element(tmp_path):
    file = _write(tmp_path, "<sheet/>")
    with pytest.raises(InvalidFileFormatError) as info:
        Sol2dAtlasSerializer().deserialize(file)
    assert 'The XML root element must be "atlas"' in str(info.value)


def test_invalid_xml(tmp_path):
    file = _write(tmp_path, "<atlas")
    with pytest.raises(InvalidXmlError):
        Sol2dAtlasSerializer().deserialize(file)


def test_missing_file(tmp_path):
    with pytest.raises(FileOpenError) as info:
        Sol2dAtlasSerializer().deserialize(str(tmp_path / "missing.xml"))
    assert "for reading" in str(info.value)


def test_unwritable_target(tmp_path):
    atlas = _sample_atlas(tmp_path)
    with pytest.raises(FileOpenError) as info:
        Sol2dAtlasSerializer().serialize(atlas, str(tmp_path / "no" / "such" / "atlas.xml"))
    assert "for writing" in str(info.value)