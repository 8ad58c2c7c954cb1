"""
Tag suggestions for moderators.

Two coarse heuristics look at a submission: one at its content, one at its
preview image. Their results are offered to the moderator as suggestions
only; nothing here changes a submission. The tags that a submission
eventually carries are the ones the moderator confirms on approval.
"""

import io
import base64
import binascii
import logging
from typing import Callable, List, Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, ImageStat

from .domain.submission import Submission
from .domain.util import normalize_tags
from .exceptions import ValidationError
from .util import get_application_config

logger = logging.getLogger(__name__)

THEME = 'theme'
SNIPPET = 'snippet'
DARK = 'dark'
LIGHT = 'light'

IMPORT_DIRECTIVE = '@import'

ImageLoader = Callable[[str], bytes]


def encode_content(raw: bytes) -> str:
    """Encode theme source for storage on a submission."""
    return base64.b64encode(raw).decode('ascii')


def decode_content(content: str) -> bytes:
    """
    Decode the stored theme source of a submission.

    Raises
    ------
    :class:`.ValidationError`
        Raised if ``content`` is not valid base64.

    """
    try:
        return base64.b64decode(content.encode('ascii'), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise ValidationError('Content is not base64-encoded') from e


def classify_content(raw: bytes, threshold: Optional[int] = None) -> str:
    """
    Classify theme source as a full ``theme`` or a ``snippet``.

    Source that imports another stylesheet, or that is longer than
    ``threshold`` characters, is a theme.
    """
    if threshold is None:
        threshold = int(get_application_config().get(
            'THEME_LENGTH_THRESHOLD', 500
        ))
    text = raw.decode('utf-8', errors='replace')
    if IMPORT_DIRECTIVE in text or len(text) > threshold:
        return THEME
    return SNIPPET


def mean_luminance(raw: bytes) -> float:
    """Mean over all pixels of (R + G + B) / 3, on a 0-255 scale."""
    image = Image.open(io.BytesIO(raw)).convert("RGB")
    # Every band has the same number of pixels.
    return sum(ImageStat.Stat(image).mean) / 3


def classify_image(raw: bytes, threshold: Optional[int] = None) -> str:
    """Classify a preview image as ``dark`` or ``light``."""
    if threshold is None:
        threshold = int(get_application_config().get(
            'DARK_LUMINANCE_THRESHOLD', 128
        ))
    return DARK if mean_luminance(raw) < threshold else LIGHT


def load_preview_image(preview: str, timeout: Optional[float] = None,
                       session: Optional[requests.Session] = None) -> bytes:
    """
    Get the bytes of a preview image.

    Parameters
    ----------
    preview : str
        Either a ``data:`` URL, or an HTTP(S) URL.

    Raises
    ------
    ValueError
        Raised if ``preview`` is neither, or the data URL is malformed.
    :class:`requests.RequestException`
        Raised if the image cannot be downloaded.

    """
    if preview.startswith('data:'):
        header, _, data = preview.partition(',')
        if not data:
            raise ValueError('Malformed data URL')
        if header.endswith(';base64'):
            try:
                return base64.b64decode(data)
            except binascii.Error as e:
                raise ValueError('Malformed data URL') from e
        return unquote_to_bytes(data)
    if preview.startswith(('http://', 'https://')):
        if timeout is None:
            timeout = float(get_application_config().get(
                'IMAGE_FETCH_TIMEOUT', 10
            ))
        resp = (session or requests).get(preview, timeout=timeout)
        resp.raise_for_status()
        return resp.content
    raise ValueError(f'Unsupported preview image: {preview[:32]}')


def suggest_tags(submission: Submission,
                 fetch_image: Optional[ImageLoader] = None) -> List[str]:
    """
    Suggest tags for a submission.

    A preview image that cannot be loaded or decoded does not prevent the
    content from being classified; there is just no image tag.

    Returns
    -------
    list
        Distinct tags, content class first.

    """
    if fetch_image is None:
        fetch_image = load_preview_image
    tags: List[str] = []
    try:
        tags.append(classify_content(decode_content(submission.content)))
    except ValidationError as e:
        logger.warning('Cannot classify content of submission %s: %s',
                       submission.submission_id, e)

    if submission.preview_image:
        try:
            tags.append(classify_image(fetch_image(submission.preview_image)))
        except (OSError, ValueError, requests.RequestException) as e:
            logger.warning('Cannot classify preview of submission %s: %s',
                           submission.submission_id, e)
    return normalize_tags(tags)

