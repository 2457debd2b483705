import base64
import io

import numpy as np
from PIL import Image

from product_dedup.errors import LoadError


BLUE = (0, 0, 255, 255)
RED = (255, 0, 0, 255)


def solid(color=BLUE, size=(16, 16)):
    return Image.new("RGBA", size, color)


def split_vertical(size=32, left=(0, 0, 0, 255), right=(255, 255, 255, 255)):
    img = Image.new("RGBA", (size, size), left)
    img.paste(Image.new("RGBA", (size // 2, size), right), (size // 2, 0))
    return img


def noise(seed, size=(64, 48)):
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    return Image.fromarray(pixels, "RGB").convert("RGBA")


def png_bytes(img):
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def data_uri(img):
    return "data:image/png;base64," + base64.b64encode(png_bytes(img)).decode("ascii")


class FakeLoader:
    """Serves in-memory images by URL; unknown URLs fail like a 404."""

    def __init__(self, images):
        self.images = dict(images)
        self.calls = []

    def load(self, url, timeout=10.0):
        self.calls.append((url, timeout))
        image = self.images.get(url)
        if image is None:
            raise LoadError(url, "server returned status 404")
        if isinstance(image, Exception):
            raise image
        return image.copy()
