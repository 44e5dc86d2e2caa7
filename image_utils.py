import base64
import binascii
import io
import logging
import os
from dataclasses import dataclass

from PIL import Image

from config import JPEG_QUALITY, MAX_IMAGE_WIDTH
from errors import DecodeError, EncodeError, ReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageFile:
    """An uploaded image held in memory."""

    filename: str
    mime_type: str
    data: bytes


def read_upload(stream, filename, mime_type):
    """Read an uploaded file stream (e.g. a werkzeug FileStorage) into an ImageFile."""
    try:
        data = stream.read()
    except (OSError, ValueError) as e:
        raise ReadError(f"Could not read {filename or 'upload'}: {e}") from e
    if not data:
        raise ReadError(f"{filename or 'upload'} is empty")
    return ImageFile(filename=filename or "floor-plan", mime_type=mime_type, data=data)


def _flatten_to_rgb(img):
    # JPEG has no alpha channel; transparent plan backgrounds become white.
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def downscale_image(image, max_width=MAX_IMAGE_WIDTH, quality=JPEG_QUALITY):
    """Bound the width of an uploaded image before it is sent to Gemini.

    Images already within ``max_width`` are returned as-is, without
    re-encoding. Wider images are resized proportionally and re-encoded as
    JPEG at ``quality``.
    """
    try:
        img = Image.open(io.BytesIO(image.data))
        img.load()
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Could not decode {image.filename} as an image: {e}") from e

    w, h = img.size
    if w <= max_width:
        return image

    new_h = max(1, round(h * max_width / w))
    resized = _flatten_to_rgb(img.resize((max_width, new_h), Image.Resampling.LANCZOS))

    buf = io.BytesIO()
    try:
        resized.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as e:
        raise EncodeError(f"Could not re-encode {image.filename}: {e}") from e
    data = buf.getvalue()
    if not data:
        raise EncodeError(f"Re-encoding {image.filename} produced no output")

    logger.info("Downscaled %s from %dx%d to %dx%d (%d -> %d bytes)",
                image.filename, w, h, max_width, new_h, len(image.data), len(data))
    stem = os.path.splitext(image.filename)[0] or "floor-plan"
    return ImageFile(filename=f"{stem}.jpg", mime_type="image/jpeg", data=data)


def read_blob(blob):
    if isinstance(blob, ImageFile):
        return blob.data
    if isinstance(blob, (bytes, bytearray)):
        return bytes(blob)
    try:
        return blob.read()
    except (AttributeError, OSError, ValueError) as e:
        raise ReadError(f"Could not read image data: {e}") from e


def encode_base64(blob):
    """Return the blob's bytes as plain base64 text, without a data: prefix."""
    return base64.b64encode(read_blob(blob)).decode("utf-8")


# Types the browser renders inline without running embedded content.
PREVIEW_MIME_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp", "image/bmp"}


def to_data_url(mime_type, b64):
    return f"data:{mime_type};base64,{b64}"


def parse_data_url(image_data):
    """Split a ``data:<mime>;base64,<payload>`` string into (mime, bytes)."""
    if not isinstance(image_data, str):
        raise DecodeError("Invalid image data")
    try:
        header, b64 = image_data.split(",", 1)
        mime = header.split(":")[1].split(";")[0]
        raw_bytes = base64.b64decode(b64, validate=True)
    except (IndexError, ValueError, binascii.Error) as e:
        raise DecodeError("Invalid image data") from e
    return mime, raw_bytes
