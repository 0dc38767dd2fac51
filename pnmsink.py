# Pixel sinks that Netpbm decoding renders into.
#
# A sink is made for a fixed width and height by a factory, then has every
# pixel set in row-major order as a packed 0xRRGGBB int. It is never read back
# during decoding.
#
# Copyright 2023 Philip Boulain.
# Licensed under the EUPL-1.2-or-later.

import typing
from PIL import Image

class ImageSink(typing.Protocol):
    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def set_pixel(self, x: int, y: int, rgb: int) -> None: ...

# Equivalent to create(width, height).
SinkFactory = typing.Callable[[int, int], ImageSink]

def unpack_rgb(rgb: int) -> typing.Tuple[int, int, int]:
    return ((rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF)

class PilImageSink:
    """Renders into a new RGB PIL image, available as .image."""

    def __init__(self, width: int, height: int):
        self.image = Image.new('RGB', (width, height))

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def set_pixel(self, x: int, y: int, rgb: int) -> None:
        self.image.putpixel((x, y), unpack_rgb(rgb))

class PackedImageSink:
    """Keeps packed 0xRRGGBB ints in a list of rows."""

    def __init__(self, width: int, height: int):
        self._width = width
        self._height = height
        self.rows: typing.List[typing.List[int]] = [
            [0] * width for _ in range(height)]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def set_pixel(self, x: int, y: int, rgb: int) -> None:
        self.rows[y][x] = rgb & 0xFFFFFF

    def pixel(self, x: int, y: int) -> int:
        return self.rows[y][x]
