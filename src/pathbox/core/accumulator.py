"""Packed-color frame buffers and cross-pass accumulation.

Frames are stored as 32-bit packed colors, one per pixel, laid out as
R << 24 | G << 16 | B << 8 | A with an opaque alpha of 255. Encoding clamps
each linear channel to [0, 1], maps NaN to 0 and rounds c * 255 to the
nearest integer; decoding divides by 255. Rounding to nearest (rather than
truncating) makes encode(decode(p)) == p for every packed value, so
repeatedly accumulating the same pass leaves a frame unchanged.

accumulate() keeps an online mean across passes:

    new = decode(previous) * (1 - w) + clamp(pass) * w,  w = 1 / (frames + 1)

so after n passes every pixel holds the (quantized) average of the n
clamped pass values.

Example:
    >>> frame = np.zeros((2, 2), dtype=np.uint32)
    >>> frame, frames = accumulate(frame, np.full((2, 2, 3), 0.5), 0)
    >>> hex(int(frame[0, 0])), frames
    ('0x808080ff', 1)
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

COLOR_MAX = 255
OPAQUE_ALPHA = 0xFF

_RED_SHIFT = 24
_GREEN_SHIFT = 16
_BLUE_SHIFT = 8


def _quantize(channels: npt.ArrayLike) -> npt.NDArray[np.uint32]:
    """Linear channels -> integers in [0, 255]."""
    values = np.nan_to_num(np.asarray(channels, dtype=np.float64), nan=0.0, posinf=1.0, neginf=0.0)
    values = np.clip(values, 0.0, 1.0)
    return np.floor(values * COLOR_MAX + 0.5).astype(np.uint32)


def encode_buffer(image: npt.ArrayLike) -> npt.NDArray[np.uint32]:
    """Encode an (..., 3) array of linear colors into packed uint32 values.

    Args:
        image: Linear RGB values with the channel as the last axis.

    Returns:
        Packed colors with the shape of image minus its channel axis.

    Raises:
        ValueError: If the last axis does not have length 3.
    """
    channels = np.asarray(image)
    if channels.shape[-1:] != (3,):
        raise ValueError(f"Expected a trailing channel axis of length 3, got shape {channels.shape}")

    q = _quantize(channels)
    return (
        (q[..., 0] << _RED_SHIFT)
        | (q[..., 1] << _GREEN_SHIFT)
        | (q[..., 2] << _BLUE_SHIFT)
        | np.uint32(OPAQUE_ALPHA)
    ).astype(np.uint32)


def _unpack_channels(frame: npt.ArrayLike) -> npt.NDArray[np.float64]:
    packed = np.asarray(frame, dtype=np.uint32)
    channels = np.stack(
        [
            (packed >> _RED_SHIFT) & 0xFF,
            (packed >> _GREEN_SHIFT) & 0xFF,
            (packed >> _BLUE_SHIFT) & 0xFF,
        ],
        axis=-1,
    )
    return channels.astype(np.float64) / COLOR_MAX


def decode_buffer(frame: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Decode packed colors into an (..., 3) float32 array in [0, 1]. Alpha is ignored."""
    return _unpack_channels(frame).astype(np.float32)


def encode_color(color: Sequence[float]) -> int:
    """Encode one linear RGB color into a packed 32-bit value.

    Args:
        color: Linear (r, g, b); each channel is clamped to [0, 1].

    Returns:
        The packed RGBA value with alpha 255.
    """
    return int(encode_buffer(np.asarray(color, dtype=np.float64).reshape(3)))


def decode_color(packed: int) -> tuple[float, float, float]:
    """Decode a packed 32-bit value into linear (r, g, b) in [0, 1]."""
    r, g, b = _unpack_channels(np.uint32(packed))
    return (float(r), float(g), float(b))


def accumulate(
    previous: npt.ArrayLike,
    new_pass: npt.ArrayLike,
    frames_accumulated: int,
) -> tuple[npt.NDArray[np.uint32], int]:
    """Blend a freshly rendered pass into the running frame.

    Args:
        previous: Packed frame of shape (H, W) holding the mean of the
            previous passes. Ignored when frames_accumulated is 0.
        new_pass: Linear radiance of shape (H, W, 3).
        frames_accumulated: Number of passes already in previous.

    Returns:
        A tuple (frame, frames_accumulated + 1).

    Raises:
        ValueError: If the shapes disagree or frames_accumulated < 0.
    """
    if frames_accumulated < 0:
        raise ValueError(f"frames_accumulated must be non-negative, got {frames_accumulated}")

    previous_np = np.asarray(previous)
    pass_np = np.asarray(new_pass)
    if pass_np.shape != previous_np.shape + (3,):
        raise ValueError(
            f"Pass shape {pass_np.shape} does not match frame shape {previous_np.shape}"
        )

    weight = 1.0 / (frames_accumulated + 1)
    fresh = np.clip(np.nan_to_num(pass_np.astype(np.float64), nan=0.0, posinf=1.0), 0.0, 1.0)
    blended = _unpack_channels(previous_np) * (1.0 - weight) + fresh * weight

    return encode_buffer(blended), frames_accumulated + 1


@dataclass
class FrameState:
    """Double-buffered packed frame plus the number of passes it averages.

    Attributes:
        current: The most recent accumulated frame, shape (H, W), uint32.
        previous: The frame before the last commit.
        frames_accumulated: Number of passes averaged into current.
    """

    current: npt.NDArray[np.uint32]
    previous: npt.NDArray[np.uint32]
    frames_accumulated: int = 0

    @classmethod
    def create(cls, width: int, height: int) -> "FrameState":
        """Allocate two cleared buffers of the given size."""
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {width}x{height}")
        return cls(
            current=np.zeros((height, width), dtype=np.uint32),
            previous=np.zeros((height, width), dtype=np.uint32),
        )

    @property
    def width(self) -> int:
        return int(self.current.shape[1])

    @property
    def height(self) -> int:
        return int(self.current.shape[0])

    def commit(self, pass_image: npt.ArrayLike) -> None:
        """Accumulate one completed pass and swap the buffers."""
        frame, frames = accumulate(self.current, pass_image, self.frames_accumulated)
        self.previous = self.current
        self.current = frame
        self.frames_accumulated = frames

    def reset(self) -> None:
        """Clear both buffers and restart the average."""
        self.current.fill(0)
        self.previous.fill(0)
        self.frames_accumulated = 0
