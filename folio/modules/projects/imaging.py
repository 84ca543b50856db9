"""
Project Image Codec
===================

Normalizes uploaded or generated images into a bounded JPEG data URI that
can be stored inline with the project record.
"""

import base64
import binascii
import io
import re
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, ImageOps

from .errors import CodecFailure

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = ('image/png', 'image/jpeg', 'image/webp')

MAX_DIMENSION = 1024
JPEG_QUALITY = 70
OUTPUT_MIME_TYPE = 'image/jpeg'
FETCH_TIMEOUT = 15

_DATA_URI_RE = re.compile(
    r'^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*?)(?P<base64>;base64)?,(?P<data>.*)$',
    re.DOTALL | re.IGNORECASE,
)


def encode_data_uri(data, mime_type):
    """Encode raw bytes as a base64 data URI"""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri):
    """Return the raw bytes held by a data URI"""
    match = _DATA_URI_RE.match(uri)
    if not match:
        raise CodecFailure('Malformed data URI')

    payload = match.group('data')
    if match.group('base64'):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise CodecFailure(f'Invalid base64 image data: {e}') from e
    return unquote_to_bytes(payload)


def _load_source_bytes(source, timeout=FETCH_TIMEOUT):
    """Resolve bytes, a data URI or an http(s) URL to raw image bytes"""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if not isinstance(source, str) or not source:
        raise CodecFailure('No image data provided')

    if source.startswith('data:'):
        return decode_data_uri(source)

    if source.startswith(('http://', 'https://')):
        try:
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise CodecFailure(f'Could not fetch image: {e}') from e
        return resp.content

    raise CodecFailure('Unsupported image source')


def _flatten(img):
    """Drop transparency onto a white background and return an RGB image"""
    has_alpha = img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info)
    if has_alpha:
        img = img.convert('RGBA')
        background = Image.new('RGB', img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[-1])
        return background
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def compress_image(source, max_dimension=MAX_DIMENSION, quality=JPEG_QUALITY):
    """
    Re-encode an image as a bounded JPEG data URI.

    Args:
        source: Raw bytes, a data URI, or an http(s) URL.
        max_dimension: Longest side of the output, in pixels. Never upscales.
        quality: JPEG quality used for every image.

    Returns:
        A `data:image/jpeg;base64,...` string.

    Raises:
        CodecFailure: The input cannot be fetched or decoded as an image.
    """
    raw = _load_source_bytes(source)

    # Malformed files surface as whatever error the format plugin raises
    try:
        img = Image.open(io.BytesIO(raw))
        img.load()
        img = ImageOps.exif_transpose(img)
    except Exception as e:
        raise CodecFailure('Could not decode the image. Please try a different file.') from e

    try:
        img.thumbnail((max_dimension, max_dimension), Image.LANCZOS)
        img = _flatten(img)

        buf = io.BytesIO()
        img.save(buf, format='JPEG', quality=quality, optimize=True)
    except (OSError, ValueError) as e:
        raise CodecFailure(f'Could not re-encode the image: {e}') from e

    return encode_data_uri(buf.getvalue(), OUTPUT_MIME_TYPE)
