"""
Loading the background template the QR code is stamped onto.
"""
import os
import threading
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError

from utils.errors import AssetError


@dataclass(frozen=True)
class TemplateImage:
    image: Image.Image
    width: int
    height: int


def load_template(path):
    """
    Read and decode the template at ``path``.

    Palette and greyscale images are converted to RGB (RGBA when they carry
    transparency) so pasting an RGB overlay does not re-quantise it.

    Raises AssetError when the file is missing, unreadable or not an image.
    """
    if not os.path.isfile(path):
        raise AssetError(f"Template image not found: {os.path.basename(path)}")

    try:
        with Image.open(path) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                img = img.convert("RGBA" if has_alpha else "RGB")
            else:
                img = img.copy()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise AssetError(f"Template image could not be read: {os.path.basename(path)}") from e

    width, height = img.size
    return TemplateImage(image=img, width=width, height=height)


class TemplateLoader:
    """
    Loads the template for each request, or once per process when
    ``cache`` is set. The asset is read-only, so a cached TemplateImage can
    be shared by concurrent requests; callers must not mutate ``image``.
    """

    def __init__(self, path, cache=False):
        self.path = path
        self.cache = cache
        self._cached = None
        self._lock = threading.Lock()

    def load(self):
        if not self.cache:
            return load_template(self.path)
        with self._lock:
            if self._cached is None:
                self._cached = load_template(self.path)
            return self._cached
