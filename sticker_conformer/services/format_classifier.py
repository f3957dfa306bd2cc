"""
Decides whether an input is supported and which engine handles it.

Only PNG and JPEG count as static images. GIF, WEBP (which may be animated)
and every video container go to the transcode path, since the image path
would silently keep only the first frame of an animation.
"""
from typing import Optional

from ..domain.models import Classification
from ..utils.fallback import first_match
from ..utils.format_utils import file_extension

ANIMATED_MIME_TYPES = (
    "image/gif",
    "video/mp4",
    "video/quicktime",
    "video/webm",
    "video/x-msvideo",
    "video/x-matroska",
    "video/mpeg",
    "image/webp",
)
STATIC_MIME_TYPES = ("image/png", "image/jpeg", "image/jpg")

ANIMATED_EXTENSIONS = (".gif", ".mp4", ".mov", ".webm", ".avi", ".mkv", ".mpeg", ".mpg", ".webp")
STATIC_EXTENSIONS = (".png", ".jpg", ".jpeg")

UNSUPPORTED = Classification(supported=False, is_static_image=False)


def normalize_mime_type(mime_type: Optional[str]) -> str:
    """'Image/PNG; charset=binary' -> 'image/png'."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def _from_mime_type(mime_type: str) -> Optional[Classification]:
    if mime_type in STATIC_MIME_TYPES:
        return Classification(supported=True, is_static_image=True)
    if mime_type in ANIMATED_MIME_TYPES:
        return Classification(supported=True, is_static_image=False)
    return None


def _from_extension(extension: str) -> Optional[Classification]:
    if extension in STATIC_EXTENSIONS:
        return Classification(supported=True, is_static_image=True)
    if extension in ANIMATED_EXTENSIONS:
        return Classification(supported=True, is_static_image=False)
    return None


def classify(mime_type: Optional[str] = None, file_name: Optional[str] = None) -> Classification:
    """
    Classifies an input from its declared mime type and file name.

    The mime type is trusted first; an absent or unrecognised mime type falls
    back to the file extension. Inputs with no usable signal are unsupported.
    """
    normalized = normalize_mime_type(mime_type)
    extension = file_extension(file_name)
    result = first_match(
        [
            lambda: _from_mime_type(normalized),
            lambda: _from_extension(extension),
        ]
    )
    if result is None:
        return UNSUPPORTED
    if result.is_static_image and normalized.startswith("video/"):
        # A video mime type never goes down the image path, whatever the name says.
        return Classification(supported=True, is_static_image=False)
    return result
