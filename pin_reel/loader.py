"""Loading and encoding of still images referenced by string."""
from __future__ import annotations

import base64
import binascii
import io
import os
from typing import Union

import numpy as np
import requests
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

ImageRef = Union[str, bytes]
HTTP_TIMEOUT = 30


def _read_bytes(ref: ImageRef) -> bytes:
    if isinstance(ref, (bytes, bytearray)):
        return bytes(ref)
    if ref.startswith("data:"):
        header, _, payload = ref.partition(",")
        if ";base64" not in header:
            raise DecodeError("only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise DecodeError(f"invalid data URL: {e}") from e
    if ref.startswith(("http://", "https://")):
        try:
            resp = requests.get(ref, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise DecodeError(f"image download failed: {ref}: {e}") from e
        return resp.content
    if not os.path.isfile(ref):
        raise DecodeError(f"image not found: {ref}")
    with open(ref, "rb") as fh:
        return fh.read()


def load_image(ref: ImageRef) -> Image.Image:
    """Decode *ref* (path, data URL, http URL or raw bytes) into a Pillow image.

    Raises :class:`DecodeError` if the reference cannot be read or decoded.
    """
    data = _read_bytes(ref)
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                return img.convert("RGBA" if "A" in img.getbands() else "RGB")
            return img.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise DecodeError(f"image decode failed: {e}") from e


def load_rgb_array(ref: ImageRef) -> np.ndarray:
    """Load *ref* as an ``uint8`` RGB array, flattening alpha onto black."""
    img = load_image(ref)
    if img.mode == "RGBA":
        base = Image.new("RGB", img.size, (0, 0, 0))
        base.paste(img, mask=img.getchannel("A"))
        img = base
    return np.array(img.convert("RGB"))


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")
