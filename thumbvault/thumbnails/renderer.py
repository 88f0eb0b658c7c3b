"""Pillow-based decoding, resampling and encoding of stored images."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from PIL import Image

from thumbvault.models.artifact import ImageFormat


class ImageEncoder:
    """Resizes images and encodes them as PNG or JPEG."""

    def __init__(self, jpg_quality: int = 90, background: str = "#ffffff") -> None:
        self.jpg_quality = jpg_quality
        self.background = background

    def open(self, path: Path) -> Image.Image:
        """Decode an image file fully into memory."""
        with Image.open(path) as image:
            image.load()
            return image.copy()

    def resize(self, image: Image.Image, width: int, height: int) -> Image.Image:
        """Resample to exactly width x height; aspect ratio is not preserved."""
        if image.mode not in ("RGBA", "RGB"):
            image = image.convert("RGBA")
        return image.resize((width, height), Image.Resampling.LANCZOS)

    def encode(self, image: Image.Image, fmt: ImageFormat) -> bytes:
        if fmt is ImageFormat.JPG:
            return self.to_jpg(image)
        return self.to_png(image)

    def to_png(self, image: Image.Image) -> bytes:
        """Convert image to PNG, keeping transparency."""
        if image.mode not in ("RGBA", "RGB"):
            image = image.convert("RGBA")

        output = BytesIO()
        image.save(output, format="PNG", optimize=True)
        return output.getvalue()

    def to_jpg(self, image: Image.Image) -> bytes:
        """Convert image to JPEG, flattening transparency onto the background."""
        if image.mode in ("RGBA", "LA", "PA") or (
            image.mode == "P" and "transparency" in image.info
        ):
            image = image.convert("RGBA")
            flattened = Image.new("RGB", image.size, self.background)
            flattened.paste(image, (0, 0), image)
            image = flattened

        if image.mode != "RGB":
            image = image.convert("RGB")

        output = BytesIO()
        image.save(output, format="JPEG", quality=self.jpg_quality, optimize=True)
        return output.getvalue()
