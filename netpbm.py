# Netpbm (PNM) image reader, image/x-portable-anymap.
#
# Decodes all six classic Netpbm variants into a 24-bit RGB image:
#   P1 plain bitmap    ASCII "0"/"1" per pixel, 1 is black
#   P2 plain graymap   ASCII decimal sample per pixel, up to max value
#   P3 plain pixmap    ASCII decimal R, G, B samples per pixel
#   P4 raw bitmap      Packed bits, MSB first, each row padded to a byte
#   P5 raw graymap     One byte per sample
#   P6 raw pixmap      One byte per R, G, B sample
#
# Header (all ASCII, whitespace separated, "#" comment lines allowed):
#   Magic number, width, height, then max value except for bitmaps.
#   A single whitespace character follows the header before raster data.
#
# Decoding is two passes: the raster is first unpacked into a stream with one
# byte per sample, which is then rendered onto the image while rescaling from
# the max value to 0-255. Only max values up to 255 (single byte samples) are
# supported.
#
# Copyright 2023 Philip Boulain.
# Licensed under the EUPL-1.2-or-later.

import enum
import io
import logging
import typing
from PIL import Image

import pnmscan
from pnmsink import ImageSink, PilImageSink, SinkFactory

# Refuse images with more pixels than this, like Pillow's decompression bomb
# guard (and with the same default). None disables the check.
MAX_IMAGE_PIXELS: typing.Optional[int] = int(1024 * 1024 * 1024 // 4 // 3)

# Largest width or height Pillow can allocate, whatever the pixel limit.
_MAX_DIMENSION = 2 ** 31 - 1

_WHITE = 0xFFFFFF
_BLACK = 0x000000

class NetpbmError(ValueError):
    """Base for all Netpbm decoding failures."""

class MissingMagicNumber(NetpbmError):
    pass

class InvalidFormat(NetpbmError):
    pass

class MissingDimensions(NetpbmError):
    pass

class InvalidDimensions(NetpbmError):
    pass

class MissingMaxValue(NetpbmError):
    pass

class InvalidMaxValue(NetpbmError):
    pass

class SampleOverflow(NetpbmError):
    pass

class SampleCountMismatch(NetpbmError):
    pass

class InvalidSampleValue(NetpbmError):
    pass

class Kind(enum.Enum):
    BITMAP = "bitmap"
    GRAYMAP = "graymap"
    PIXMAP = "pixmap"

class FormatVersion(enum.Enum):
    P1 = (1, Kind.BITMAP, False)
    P2 = (2, Kind.GRAYMAP, False)
    P3 = (3, Kind.PIXMAP, False)
    P4 = (4, Kind.BITMAP, True)
    P5 = (5, Kind.GRAYMAP, True)
    P6 = (6, Kind.PIXMAP, True)

    def __init__(self, number: int, kind: Kind, raw: bool):
        self.number = number
        self.kind = kind
        self.raw = raw

    @property
    def has_max_value(self) -> bool:
        return self.kind is not Kind.BITMAP

    @classmethod
    def from_magic(cls, magic: bytes) -> 'FormatVersion':
        if len(magic) != 2 or magic[0:1] != b"P" or magic[1:2] not in b"123456":
            raise InvalidFormat(f"Unsupported file format {magic!r}")
        return cls["P" + magic[1:2].decode("ascii")]

class Header(typing.NamedTuple):
    version: FormatVersion
    width: int
    height: int
    max_value: typing.Optional[int]  # None for bitmaps.

def read_header(scanner: pnmscan.NetpbmScanner) -> Header:
    """Read and validate the header, leaving the scanner at the raster."""
    magic = scanner.next_word()
    if magic is None:
        raise MissingMagicNumber("File does not have a magic number")
    version = FormatVersion.from_magic(magic)

    # The scanner only ever yields digits, so these can't be negative.
    width = scanner.next_unsigned_integer()
    height = scanner.next_unsigned_integer()
    if width is None or height is None:
        raise MissingDimensions("File does not have width and/or height")

    max_value: typing.Optional[int] = None
    if version.has_max_value:
        max_value = scanner.next_unsigned_integer()
        if max_value is None:
            raise MissingMaxValue("File does not have a max value")
        if max_value <= 0:
            raise InvalidMaxValue(f"Invalid max value {max_value}")

    return Header(version, width, height, max_value)

def read_info(data: typing.Union[bytes, bytearray, memoryview]) -> Header:
    """Read just the header of Netpbm file data."""
    return read_header(pnmscan.NetpbmScanner(data))

# Unpacking; each returns one byte per sample.

def unpack_digits(data: bytes) -> bytes:
    """Unpack P1 ASCII digits, dropping everything else."""
    return bytes(ch - ord("0") for ch in data if pnmscan.is_digit(ch))

def unpack_bits(data: bytes, width: int) -> bytes:
    """Unpack P4 bits, discarding the padding at the end of each row."""
    samples = bytearray()
    if width == 0:
        # Rows are empty, so there are no bits to take.
        return bytes(samples)
    bits_read = 0
    for packed in data:
        for shift in range(7, -1, -1):
            samples.append((packed >> shift) & 1)
            bits_read += 1
            if bits_read % width == 0:
                # End of row; rest of this byte is padding.
                break
    return bytes(samples)

def unpack_integers(data: bytes) -> bytes:
    """Unpack P2/P3 ASCII decimal samples, which must each fit in a byte."""
    samples = bytearray()
    digits = bytearray()
    for ch in data:
        if pnmscan.is_digit(ch):
            digits.append(ch)
        elif digits:
            samples.append(_integer_sample(digits))
            digits.clear()
    if digits:
        samples.append(_integer_sample(digits))
    return bytes(samples)

def _integer_sample(digits: bytearray) -> int:
    value = int(digits)
    if value > 255:
        raise SampleOverflow(f"Sample {value} is greater than 255")
    return value

def unpack(header: Header, data: bytes) -> bytes:
    version = header.version
    if version is FormatVersion.P1:
        return unpack_digits(data)
    elif version is FormatVersion.P4:
        return unpack_bits(data, header.width)
    elif version in (FormatVersion.P2, FormatVersion.P3):
        return unpack_integers(data)
    else:
        # P5, P6: already a byte per sample.
        return data

# Rendering.

def rescale(sample: int, max_value: int) -> int:
    """Scale a sample from 0..max_value to 0..255, truncating."""
    # Truncates rather than rounds, so e.g. 1 of max 2 is 127, not 128.
    return int(sample / max_value * 255)

def _check_count(samples: bytes, expected: int) -> None:
    if len(samples) != expected:
        raise SampleCountMismatch(
            f"Image data has {len(samples)} values, expected {expected}")

def _channel(sample: int, max_value: int) -> int:
    value = rescale(sample, max_value)
    if value > 255:
        raise InvalidSampleValue(
            f"Sample {sample} is greater than max value {max_value}")
    return value

def render_bitmap(sink: ImageSink, samples: bytes) -> None:
    width = sink.width
    _check_count(samples, width * sink.height)
    x = y = 0
    for sample in samples:
        if sample == 0:
            sink.set_pixel(x, y, _WHITE)
        elif sample == 1:
            sink.set_pixel(x, y, _BLACK)
        else:
            raise InvalidSampleValue(f"Bitmap value {sample} at x={x}, y={y}")
        x += 1
        if x >= width:
            x = 0
            y += 1

def render_graymap(sink: ImageSink, max_value: int, samples: bytes) -> None:
    width = sink.width
    _check_count(samples, width * sink.height)
    x = y = 0
    for sample in samples:
        gray = _channel(sample, max_value)
        sink.set_pixel(x, y, (gray << 16) | (gray << 8) | gray)
        x += 1
        if x >= width:
            x = 0
            y += 1

def render_pixmap(sink: ImageSink, max_value: int, samples: bytes) -> None:
    width = sink.width
    _check_count(samples, 3 * width * sink.height)
    x = y = 0
    for i in range(0, len(samples), 3):
        red = _channel(samples[i], max_value)
        green = _channel(samples[i + 1], max_value)
        blue = _channel(samples[i + 2], max_value)
        sink.set_pixel(x, y, (red << 16) | (green << 8) | blue)
        x += 1
        if x >= width:
            x = 0
            y += 1

def render(header: Header, sink: ImageSink, samples: bytes) -> None:
    kind = header.version.kind
    if kind is Kind.BITMAP:
        render_bitmap(sink, samples)
    elif kind is Kind.GRAYMAP:
        render_graymap(sink, header.max_value, samples)
    else:
        render_pixmap(sink, header.max_value, samples)

# Entry points.

_DEFAULT_LIMIT = object()

def _check_limit(header: Header, max_pixels) -> None:
    if max_pixels is _DEFAULT_LIMIT:
        max_pixels = MAX_IMAGE_PIXELS
    width, height = header.width, header.height
    if width > _MAX_DIMENSION or height > _MAX_DIMENSION:
        raise InvalidDimensions(
            f"Image size {width}x{height} exceeds largest dimension "
            f"{_MAX_DIMENSION}")
    # A zero side makes the product zero, so check each side on its own too.
    if max_pixels is not None and (width * height > max_pixels
                                   or width > max_pixels
                                   or height > max_pixels):
        raise InvalidDimensions(
            f"Image size {header.width}x{header.height} exceeds limit of "
            f"{max_pixels} pixels")

def decode_into(data: typing.Union[bytes, bytearray, memoryview],
                sink_factory: SinkFactory,
                max_pixels=_DEFAULT_LIMIT) -> ImageSink:
    """Decode Netpbm data into a sink made by sink_factory(width, height)."""
    scanner = pnmscan.NetpbmScanner(data)
    header = read_header(scanner)
    logging.debug(f"Netpbm {header.version.name} {header.width}x"
                  f"{header.height}, max value {header.max_value}")
    _check_limit(header, max_pixels)

    samples = unpack(header, scanner.remaining_data())
    sink = sink_factory(header.width, header.height)
    render(header, sink, samples)
    return sink

def decode(data: typing.Union[bytes, bytearray, memoryview],
           max_pixels=_DEFAULT_LIMIT) -> Image.Image:
    """Decode Netpbm data to an RGB PIL image."""
    sink = decode_into(data, PilImageSink, max_pixels=max_pixels)
    return sink.image

def decode_stream(pnm: io.BufferedReader,
                  max_pixels=_DEFAULT_LIMIT) -> Image.Image:
    # The whole file is needed in memory anyway.
    return decode(pnm.read(), max_pixels=max_pixels)
