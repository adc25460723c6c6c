"""In-memory RGB images with PPM, TGA and BMP support."""

from __future__ import annotations

import os
import struct
from pathlib import Path

import numpy as np

_TGA_HEADER_SIZE = 18
_BMP_HEADER = struct.Struct("<2siiiiiihhiiiiii")


def clamp_color_component(c: float) -> int:
    """Map a colour channel in [0, 1] to a byte, truncating and clamping."""
    return min(255, max(0, int(c * 255)))


def _quantize(colors: np.ndarray) -> np.ndarray:
    scaled = np.nan_to_num(np.asarray(colors, dtype=float) * 255, nan=0.0)
    return np.trunc(np.clip(scaled, 0, 255)).astype(np.uint8)


def _require_suffix(path, suffix: str) -> str:
    name = os.fspath(path)
    if not name.endswith(suffix):
        raise ValueError(f"{name!r} must end in {suffix}")
    return name


class Image:
    """A width x height grid of RGB colours; (0, 0) is the bottom-left pixel."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError("image dimensions must be non-negative")
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3))

    def _check(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")

    def get_pixel(self, x: int, y: int) -> np.ndarray:
        self._check(x, y)
        return self._pixels[y, x].copy()

    def set_pixel(self, x: int, y: int, color) -> None:
        self._check(x, y)
        self._pixels[y, x] = np.asarray(color, dtype=float)

    def fill(self, color) -> None:
        self._pixels[:, :] = np.asarray(color, dtype=float)

    @classmethod
    def _from_bytes(cls, width: int, height: int, rgb_top_down: np.ndarray) -> Image:
        image = cls(width, height)
        image._pixels = rgb_top_down.reshape(height, width, 3)[::-1].astype(float) / 255.0
        return image

    @classmethod
    def load_ppm(cls, path) -> Image:
        """Read a binary (P6) PPM with one comment line."""
        name = _require_suffix(path, ".ppm")
        with open(name, "rb") as f:
            if b"P6" not in f.readline():
                raise ValueError("not a P6 PPM file")
            if not f.readline().startswith(b"#"):
                raise ValueError("PPM comment line missing")
            fields = f.readline().split()
            if len(fields) < 2:
                raise ValueError("PPM dimensions missing")
            width, height = int(fields[0]), int(fields[1])
            if b"255" not in f.readline():
                raise ValueError("PPM maximum value must be 255")
            size = width * height * 3
            body = f.read(size)
        if len(body) < size:
            raise ValueError("PPM pixel data truncated")
        return cls._from_bytes(width, height, np.frombuffer(body, dtype=np.uint8))

    def save_ppm(self, path) -> None:
        name = _require_suffix(path, ".ppm")
        header = f"P6\n# Creator: pathtracer\n{self.width} {self.height}\n255\n".encode("ascii")
        with open(name, "wb") as f:
            f.write(header)
            f.write(_quantize(self._pixels[::-1]).tobytes())

    @classmethod
    def load_tga(cls, path) -> Image:
        """Read an uncompressed 24-bit type 2 TGA."""
        name = _require_suffix(path, ".tga")
        data = Path(name).read_bytes()
        if len(data) < _TGA_HEADER_SIZE:
            raise ValueError("TGA header truncated")
        header = data[:_TGA_HEADER_SIZE]
        expected = {2: 2, 16: 24, 17: 32}
        for i, byte in enumerate(header):
            if i in (12, 13, 14, 15):
                continue
            if byte != expected.get(i, 0):
                raise ValueError(f"unsupported TGA header byte {i}: {byte}")
        width = header[12] + 256 * header[13]
        height = header[14] + 256 * header[15]
        size = width * height * 3
        body = data[_TGA_HEADER_SIZE:_TGA_HEADER_SIZE + size]
        if len(body) < size:
            raise ValueError("TGA pixel data truncated")
        bgr = np.frombuffer(body, dtype=np.uint8).reshape(height, width, 3)
        return cls._from_bytes(width, height, bgr[:, :, ::-1])

    def save_tga(self, path) -> None:
        name = _require_suffix(path, ".tga")
        header = bytearray(_TGA_HEADER_SIZE)
        header[2] = 2
        header[12] = self.width % 256
        header[13] = (self.width // 256) & 0xFF
        header[14] = self.height % 256
        header[15] = (self.height // 256) & 0xFF
        header[16] = 24
        header[17] = 32
        with open(name, "wb") as f:
            f.write(bytes(header))
            f.write(_quantize(self._pixels[::-1, :, ::-1]).tobytes())

    def save_bmp(self, path) -> None:
        """Write an uncompressed 24-bit BMP with rows padded to 4 bytes."""
        bytes_per_line = (3 * (self.width + 1) // 4) * 4
        image_size = bytes_per_line * self.height
        header = _BMP_HEADER.pack(
            b"BM", 54 + image_size, 0, 54, 40, self.width, self.height,
            1, 24, 0, image_size, 0, 0, 0, 0,
        )
        rows = _quantize(self._pixels[:, :, ::-1]).reshape(self.height, self.width * 3)
        padding = np.zeros((self.height, bytes_per_line - self.width * 3), dtype=np.uint8)
        with open(os.fspath(path), "wb") as f:
            f.write(header)
            f.write(np.hstack((rows, padding)).tobytes())

    def save(self, path) -> None:
        """Save as BMP when the name ends in .bmp, otherwise as TGA."""
        if os.fspath(path).endswith(".bmp"):
            self.save_bmp(path)
        else:
            self.save_tga(path)