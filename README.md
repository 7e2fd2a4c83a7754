# spritepack

A library for working with texture atlases:

- pack a list of sprites into one or more atlas images, optionally cropping
  transparent borders and sharing pixels between identical sprites;
- write and read atlas descriptions in a simple XML format;
- cut an existing atlas, or a texture laid out as a regular grid, back into
  separate PNG files.

Images are handled with Pillow.

## Installation

```
pip install spritepack
```

## Atlas description format

```xml
<?xml version="1.0" encoding="UTF-8"?>
<atlas texture="sheet.png">
    <frame name="hero" tx="0" ty="0" tw="32" th="48" sx="2" sy="0" sw="32" sh="48"/>
    <frame name="coin" tx="32" ty="0" tw="16" th="16" sx="0" sy="0" sw="16" sh="16" rotated="true"/>
</atlas>
```

`tx`, `ty`, `tw` and `th` give the frame's place on the texture; `sx`, `sy`,
`sw` and `sh` give its place within the sprite image it was taken from. When
writing, the `texture` path is stored relative to the XML file's directory;
when reading, a relative `texture` path is resolved against that directory.
Every frame must carry all eight integer attributes.

## Reading and writing atlases

```python
from spritepack.serializer import Sol2dAtlasSerializer

serializer = Sol2dAtlasSerializer()
atlas = serializer.deserialize("assets/sheet.xml")
for frame in atlas.frames:
    print(frame.name, frame.texture_rect)

serializer.serialize(atlas, "out/sheet.xml")
```

`Sol2dAtlasSerializer.default_file_extension` is `"xml"`. Frames with no name
are written with a default built from the texture name and the frame's
position, such as `sheet_0001.png` (see `make_default_frame_name`).

## Unpacking

```python
from spritepack.pack import AtlasPack, GridOptions, GridPack

written = AtlasPack(atlas).unpack("out/sprites")

grid = GridPack("assets/tiles.png")
grid.reconfigure(GridOptions(column_count=8, row_count=4,
                             sprite_width=16, sprite_height=16))
grid.update(horizontal_spacing=1, vertical_spacing=1)
print(grid.frame_count())
grid.unpack("out/tiles")
```

`unpack` writes one PNG per frame and returns the paths it wrote. Grid frames
are named after the texture, as `tiles_0001`, `tiles_0002` and so on. When a
file already exists, the next free name such as `tiles_0001 (1).png` is used.

A grid is valid only when the row and column counts and the sprite size are all
positive; negative margins and spacings are treated as zero. An invalid grid has
no frames. `GridPack.subscribe(callback)` registers a callback that runs
whenever the grid's frames change and returns a function that removes it.

## Packing

`AtlasPacker` is abstract: it takes its placement strategy from
`create_algorithm(max_atlas_size)`, which must return an `AtlasPackerAlgorithm`
with `insert(width, height)` and `reset_bin()` methods. `insert` returns a null
`Rect` when the rectangle does not fit; the packer then starts a new atlas.

```python
from spritepack.model import Rect, Sprite
from spritepack.packer import AtlasPacker, AtlasPackerAlgorithm, AtlasPackerOptions


class RowAlgorithm(AtlasPackerAlgorithm):
    def __init__(self, size):
        self.width, self.height = size
        self.reset_bin()

    def reset_bin(self):
        self.x = 0

    def insert(self, width, height):
        if self.x + width > self.width or height > self.height:
            return Rect()
        rect = Rect(self.x, 0, width, height)
        self.x += width
        return rect


class RowPacker(AtlasPacker):
    def create_algorithm(self, max_atlas_size):
        return RowAlgorithm(max_atlas_size)


pack = RowPacker().pack(sprites, AtlasPackerOptions(crop=True, detect_duplicates=True))
print(len(pack))
pack.save("out", "sheet", "png", remove_file_ext=True)
```

A frame is marked as rotated when the width it was placed with equals the
sprite's height. `crop_rect` finds the bounds of an image's non-transparent
pixels, and `render_items` draws placed items onto a canvas.

`save` writes `sheet.png` and `sheet.xml`, or `sheet-1.png`, `sheet-2.png` and
so on when more than one atlas was produced.

## What it does not do

The package ships no ready-made placement algorithms (such as shelf, skyline,
guillotine or max-rects packing); one must be supplied as shown above. It also
has no command-line tool or graphical interface: it is used as a library.

## Errors

All failures raise subclasses of `spritepack.errors.PackerError`:
`FileOpenError`, `InvalidXmlError`, `InvalidFileFormatError`,
`ImageLoadingError` and `ImageSavingError`.