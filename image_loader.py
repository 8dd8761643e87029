import logging
import os

import numpy as np
from PIL import Image, UnidentifiedImageError

from errors import ImageDecodeError


class ImageLoader:
    """Decodes a source file into an (h, w, 3) uint8 RGB array."""

    def _as_rgb(self, arr, image_path):
        arr = np.asarray(arr)
        if arr.ndim == 2:
            arr = np.repeat(arr[..., None], 3, axis=2)
        elif arr.ndim == 3 and arr.shape[2] == 1:
            arr = np.repeat(arr, 3, axis=2)
        elif arr.ndim == 3 and arr.shape[2] == 4:
            arr = arr[..., :3]
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ImageDecodeError(f"Unsupported array shape {arr.shape}: {image_path}")
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        return arr

    def _read_array(self, image_path, ext):
        if ext == "npy":
            return np.load(image_path)
        with np.load(image_path) as data:
            # Key is 'image' when we wrote it, else the first array
            key = 'image' if 'image' in data else data.files[0]
            return data[key]

    def read_image(self, image_path):
        ext = image_path.split('.')[-1].lower()
        if not os.path.isfile(image_path):
            raise ImageDecodeError(f"Image not found: {image_path}")

        try:
            if ext in ("npy", "npz"):
                arr = self._read_array(image_path, ext)
            else:
                with Image.open(image_path) as img:
                    arr = np.asarray(img.convert("RGB"))
        except (OSError, ValueError, IndexError, UnidentifiedImageError) as e:
            raise ImageDecodeError(f"Cannot decode {image_path}: {e}") from e

        arr = self._as_rgb(arr, image_path)
        logging.info(f"Loaded {image_path} ({arr.shape[1]}x{arr.shape[0]})")
        return arr


def load_image(image_path):
    return ImageLoader().read_image(image_path)
