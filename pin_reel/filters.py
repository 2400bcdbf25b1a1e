"""Colour filter presets for still edits.

Each preset is a chain of CSS style filter functions applied in order, with
clamping to ``[0, 255]`` after every step as a browser does.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np

FILTER_PRESETS = ("none", "noir", "vivid", "gold", "cinema")

FILTER_CHAINS: Dict[str, List[Tuple[str, float]]] = {
    "none": [],
    "noir": [("grayscale", 1.0), ("contrast", 1.2)],
    "vivid": [("saturate", 1.5), ("contrast", 1.1)],
    "gold": [("sepia", 0.3), ("saturate", 1.4), ("brightness", 1.1)],
    "cinema": [("contrast", 1.2), ("brightness", 0.9), ("saturate", 1.1)],
}


def grayscale_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, max(0.0, amount))
    return np.array(
        [
            [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
            [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
        ],
        dtype=np.float32,
    )


def sepia_matrix(amount: float) -> np.ndarray:
    a = 1.0 - min(1.0, max(0.0, amount))
    return np.array(
        [
            [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
            [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
            [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
        ],
        dtype=np.float32,
    )


def saturate_matrix(s: float) -> np.ndarray:
    return np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ],
        dtype=np.float32,
    )


def _apply_step(f: np.ndarray, name: str, amount: float) -> np.ndarray:
    if name == "grayscale":
        f = f @ grayscale_matrix(amount).T
    elif name == "sepia":
        f = f @ sepia_matrix(amount).T
    elif name == "saturate":
        f = f @ saturate_matrix(amount).T
    elif name == "brightness":
        f = f * amount
    elif name == "contrast":
        f = (f - 127.5) * amount + 127.5
    else:
        raise ValueError(f"unknown filter function: {name}")
    return np.clip(f, 0, 255)


def apply_filter(rgb: np.ndarray, preset: str) -> np.ndarray:
    """Return a filtered copy of ``uint8`` RGB array *rgb*.

    Parameters
    ----------
    rgb:
        ``H×W×3`` ``uint8`` array.
    preset:
        One of :data:`FILTER_PRESETS`. ``none`` returns an unchanged copy.
    """
    if preset not in FILTER_CHAINS:
        raise ValueError(f"unknown filter preset: {preset}")
    chain = FILTER_CHAINS[preset]
    if not chain:
        return rgb.copy()
    f = rgb.astype(np.float32)
    for name, amount in chain:
        f = _apply_step(f, name, amount)
    return (f + 0.5).astype(np.uint8)
