"""Text rendering of preprocessed frames, for eyeballing what the agent sees."""

from __future__ import annotations

import numpy as np

from deepq.transition import FRAME_SHAPE, Frame

# Dark -> bright.
RAMP = " .:-=+*#%@"


def draw_frame(frame: Frame) -> str:
    frame = np.asarray(frame)
    if frame.shape != FRAME_SHAPE:
        raise ValueError(f"frame must have shape {FRAME_SHAPE}, got {frame.shape}")
    idx = (frame.astype(np.int64) * len(RAMP)) // 256
    width = frame.shape[1]
    lines = ["+" + "-" * width + "+"]
    for row in idx:
        lines.append("|" + "".join(RAMP[i] for i in row) + "|")
    lines.append("+" + "-" * width + "+")
    return "\n".join(lines)
