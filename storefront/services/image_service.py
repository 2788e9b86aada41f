"""
Storefront Backend — Image Processing
=======================================

What:  Re-encodes uploaded images into the two stored renditions.
How:   Pillow, run in Starlette's threadpool (decode/resize is CPU-bound).

Renditions (always JPEG, whatever the input format):
    main:       fit inside 1200×1200, never upscaled, quality 85
    thumbnail:  exactly 400×400, centre-cropped to cover, quality 80
"""

import io
from dataclasses import dataclass
from typing import Tuple

from PIL import Image, ImageOps
from starlette.concurrency import run_in_threadpool

MAIN_MAX_SIZE: Tuple[int, int] = (1200, 1200)
THUMBNAIL_SIZE: Tuple[int, int] = (400, 400)
MAIN_QUALITY = 85
THUMBNAIL_QUALITY = 80


@dataclass(frozen=True)
class ImageRenditions:
    main: bytes
    thumbnail: bytes


def _to_rgb(image: Image.Image) -> Image.Image:
    # JPEG has no alpha channel; flatten transparency onto white
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


class ImageService:
    """Stateless; one instance lives on the AppContext."""

    def render_sync(self, content: bytes) -> ImageRenditions:
        """
        Decode `content` and produce both renditions.

        Raises:
            PIL.UnidentifiedImageError / OSError for undecodable input.
        """
        with Image.open(io.BytesIO(content)) as source:
            source = ImageOps.exif_transpose(source)
            rgb = _to_rgb(source)

            main = rgb.copy()
            # thumbnail() keeps aspect ratio and only ever shrinks
            main.thumbnail(MAIN_MAX_SIZE, Image.Resampling.LANCZOS)

            thumb = ImageOps.fit(rgb, THUMBNAIL_SIZE, Image.Resampling.LANCZOS)

            return ImageRenditions(
                main=_encode_jpeg(main, MAIN_QUALITY),
                thumbnail=_encode_jpeg(thumb, THUMBNAIL_QUALITY),
            )

    async def render(self, content: bytes) -> ImageRenditions:
        return await run_in_threadpool(self.render_sync, content)
