"""Color helpers: hex parsing, BGRA pixel order, numpy <-> QImage.

Pixel buffers are (H, W, 4) uint8 arrays in the byte layout of
QImage.Format_ARGB32 on little-endian systems, which is BGRA in memory.
The format is non-premultiplied, so channel values read back are the
same straight RGBA values a canvas would report.
"""

import numpy as np
from PyQt6.QtGui import QColor, QImage

IMAGE_FORMAT = QImage.Format.Format_ARGB32

# Channel indices into a BGRA pixel
B, G, R, A = 0, 1, 2, 3


def parse_hex(color: str) -> tuple[int, int, int, int]:
    """Parse "#RGB" or "#RRGGBB" (leading '#' optional) into (r, g, b, 255).

    Raises:
        ValueError: if the string is not a 3- or 6-digit hex color.
    """
    h = color.strip().lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    if len(h) != 6:
        raise ValueError(f"Expected #RGB or #RRGGBB color, got {color!r}")
    try:
        num = int(h, 16)
    except ValueError:
        raise ValueError(f"Expected #RGB or #RRGGBB color, got {color!r}") from None
    return (num >> 16) & 255, (num >> 8) & 255, num & 255, 255


def hex_to_bgra(color: str) -> np.ndarray:
    """Parse a hex color into a (4,) uint8 BGRA pixel."""
    r, g, b, a = parse_hex(color)
    return np.array([b, g, r, a], dtype=np.uint8)


def hex_to_qcolor(color: str, opacity: float = 1.0) -> QColor:
    """Parse a hex color into a QColor with the given opacity in [0, 1]."""
    r, g, b, _ = parse_hex(color)
    qcolor = QColor(r, g, b)
    qcolor.setAlphaF(min(1.0, max(0.0, opacity)))
    return qcolor


def random_hex(rng: np.random.Generator) -> str:
    """Uniformly random "#rrggbb" color."""
    return f"#{int(rng.integers(0, 0x1000000)):06x}"


def new_image(width: int, height: int, fill: str | None = None) -> QImage:
    """Allocate an ARGB32 image, optionally filled with a hex color."""
    image = QImage(width, height, IMAGE_FORMAT)
    image.fill(hex_to_qcolor(fill) if fill is not None else QColor(0, 0, 0, 0))
    return image


def qimage_to_numpy(image: QImage) -> np.ndarray:
    """Copy a QImage's pixels into a (H, W, 4) uint8 BGRA array.

    The image is converted to ARGB32 first if it uses another format.
    """
    if image.format() != IMAGE_FORMAT:
        image = image.convertToFormat(IMAGE_FORMAT)
    w, h = image.width(), image.height()
    ptr = image.constBits()
    ptr.setsize(image.sizeInBytes())
    rows = np.frombuffer(ptr, dtype=np.uint8).reshape(h, image.bytesPerLine())
    return rows[:, : w * 4].reshape(h, w, 4).copy()


def numpy_to_qimage(argb: np.ndarray) -> QImage:
    """Create a QImage from a BGRA pixel array with GC safety.

    Args:
        argb: (H, W, 4) uint8 BGRA array.

    Returns:
        QImage with Format_ARGB32. The numpy array is attached to the
        QImage as _numpy_ref to prevent garbage collection. Call .copy()
        to get an image that owns its pixels.
    """
    h, w = argb.shape[:2]
    data = np.ascontiguousarray(argb)
    stride = 4 * w
    image = QImage(data.data, w, h, stride, IMAGE_FORMAT)
    # Prevent GC of the numpy array while QImage is alive
    image._numpy_ref = data
    return image
