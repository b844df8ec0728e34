# facelabel/core/render.py
"""
Matplotlib debug rendering: debug.png with the photo bounds, person boxes,
label boxes (red when still clashing) and label text anchors.
"""

from __future__ import annotations

import warnings
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

from facelabel.core.config import RENDER_HEIGHT_PX, RENDER_WIDTH_PX
from facelabel.core.geometry import box_to_polygon
from facelabel.core.types import Box, PhotoLayout


def set_axes_to_image(ax: plt.Axes, width: int, height: int, pad_frac: float = 0.02) -> None:
    """Image coordinates: origin top-left, y down; equal aspect; hide axes."""
    dx = max(1.0, width * pad_frac)
    dy = max(1.0, height * pad_frac)
    ax.set_xlim(-dx, width + dx)
    ax.set_ylim(height + dy, -dy)
    ax.set_aspect("equal", adjustable="box")
    ax.axis("off")


def _draw_box(ax: plt.Axes, b: Box, **kwargs) -> None:
    xy = np.array(box_to_polygon(b).exterior.coords)
    ax.plot(xy[:, 0], xy[:, 1], **kwargs)


def render_debug(
    layout: PhotoLayout,
    output_path: str | Path,
    width_px: int = RENDER_WIDTH_PX,
    height_px: int = RENDER_HEIGHT_PX,
    scale: int = 1,
) -> None:
    """Render debug overlay. scale multiplies output resolution (1x, 2x, 4x)."""
    w, h = width_px * scale, height_px * scale
    fig = plt.figure(figsize=(w / 100.0, h / 100.0), dpi=100, constrained_layout=False)
    # Leave bottom margin so legend does not overlap the image
    ax = fig.add_axes([0.05, 0.08, 0.9, 0.88])
    ax.axis("off")

    dim = layout.dimension
    full = dim.full_box()
    xy = np.array(box_to_polygon(full).exterior.coords)
    ax.fill(xy[:, 0], xy[:, 1], facecolor="whitesmoke", edgecolor="black", linewidth=1, label="photo")
    if layout.bounds != full:
        _draw_box(ax, layout.bounds, linestyle="--", color="grey", linewidth=1, label="crop")

    for i, person in enumerate(layout.people):
        _draw_box(ax, person.box, color="blue", linewidth=1.5, label="person" if i == 0 else None)

    clash_seen = ok_seen = False
    for label in layout.labels:
        if label.clash:
            _draw_box(ax, label.box, color="red", linewidth=1.5, label=None if clash_seen else "label (clash)")
            clash_seen = True
        else:
            _draw_box(ax, label.box, color="green", linewidth=1.5, label=None if ok_seen else "label")
            ok_seen = True
        ax.scatter([label.box.x], [label.box.y], s=8, color="black", zorder=5)
        ax.text(
            label.box.x + label.box.w / 2,
            label.box.y + label.box.h / 2,
            label.text,
            fontsize=7,
            ha="center",
            va="center",
            zorder=6,
        )

    set_axes_to_image(ax, dim.width, dim.height)
    # Legend in the reserved bottom margin so it never overlaps the image
    leg = ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.02), ncol=4, fontsize=8)
    try:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", message=".*constrained_layout.*", category=UserWarning)
            fig.savefig(output_path, dpi=100, facecolor="white", bbox_inches="tight", bbox_extra_artists=[leg])
    finally:
        plt.close(fig)
