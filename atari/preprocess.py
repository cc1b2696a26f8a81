"""Screen preprocessing: raw ALE screen -> 84x84 grayscale frame.

Steps:
  1. RGB -> luminance (ITU-R 601 weights), skipped for grayscale input
  2. area-average downsampling 210x160 -> 84x84

The downsampling averages every source pixel that overlaps an output cell,
weighted by the overlap, so no source pixel is dropped. It is expressed as
two small weight matrices:  out = Wy @ gray @ Wx.T
"""

from __future__ import annotations

from functools import lru_cache

import numpy as np

from deepq.transition import FRAME_SIZE, Frame, make_frame

RAW_FRAME_HEIGHT = 210
RAW_FRAME_WIDTH = 160

LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)


@lru_cache(maxsize=None)
def area_weights(src: int, dst: int) -> np.ndarray:
    """(dst, src) matrix; row i averages the source span of output cell i."""
    w = np.zeros((dst, src), dtype=np.float64)
    scale = src / dst
    for i in range(dst):
        lo, hi = i * scale, (i + 1) * scale
        for j in range(int(np.floor(lo)), int(np.ceil(hi))):
            overlap = min(hi, j + 1) - max(lo, j)
            if overlap > 0:
                w[i, j] = overlap
        w[i] /= scale
    w.setflags(write=False)
    return w


def to_grayscale(raw: np.ndarray) -> np.ndarray:
    raw = np.asarray(raw)
    if raw.ndim == 2:
        return raw.astype(np.float64)
    if raw.ndim == 3 and raw.shape[2] == 3:
        return raw.astype(np.float64) @ LUMA
    raise ValueError(f"expected (H, W) or (H, W, 3) screen, got shape {raw.shape}")


def preprocess_screen(raw: np.ndarray) -> Frame:
    """Downsample and grayscale an ALE screen into a read-only frame."""
    gray = to_grayscale(raw)
    if gray.shape != (RAW_FRAME_HEIGHT, RAW_FRAME_WIDTH):
        raise ValueError(
            f"expected a {RAW_FRAME_HEIGHT}x{RAW_FRAME_WIDTH} screen, got {gray.shape}"
        )
    wy = area_weights(RAW_FRAME_HEIGHT, FRAME_SIZE)
    wx = area_weights(RAW_FRAME_WIDTH, FRAME_SIZE)
    small = wy @ gray @ wx.T
    return make_frame(np.clip(np.rint(small), 0, 255))
