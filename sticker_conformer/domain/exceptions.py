"""
Defines custom exception types for the Sticker Conformer application.

Every failure that leaves the pipeline is one of these kinds, so the boundary
layer can turn each into a distinct user-facing message without inspecting
library-specific errors. All custom exceptions inherit from the base
`StickerConformerException`.
"""


class StickerConformerException(Exception):
    """Base class for all custom exceptions in the Sticker Conformer application."""

    pass


# --- Input Validation Exceptions ---
class ProbeError(StickerConformerException):
    """
    Raised when an input cannot be read or analysed at all.

    This covers ffprobe failures on corrupt or truncated containers and images
    that Pillow cannot identify. A missing duration is NOT a probe error; the
    duration resolver degrades to a default instead.
    """

    pass


class UnsupportedFormatError(StickerConformerException):
    """Raised when the format classifier rejects the declared type of an input."""

    pass


class OversizeError(StickerConformerException):
    """
    Raised when an input, local or downloaded, exceeds the input size ceiling.
    """

    pass


# --- Remote Resolution Exceptions ---
class RemoteAssetError(StickerConformerException):
    """Base class for failures while resolving or fetching a Tenor asset."""

    pass


class InvalidLinkError(RemoteAssetError):
    """Raised when no Tenor identifier can be extracted from a share link."""

    pass


class AssetNotFoundError(RemoteAssetError):
    """
    Raised when Tenor has no post for the identifier, or the post carries none
    of the known media variants.
    """

    pass


class ProviderError(RemoteAssetError):
    """Raised when the Tenor metadata API call fails or returns garbage."""

    pass


class NetworkError(RemoteAssetError):
    """Raised when downloading the media times out or the connection fails."""

    pass


# --- Encoding Exceptions ---
class EncodeError(StickerConformerException):
    """
    Raised when an external encoder (ffmpeg) or the image codec fails.

    The diagnostic text of the failing tool is kept in `details` so it can be
    logged without being shown to end users.
    """

    def __init__(self, message: str, details: str = ""):
        super().__init__(message)
        self.details = details


# --- Boundary Exceptions ---
class CallerBusyError(StickerConformerException):
    """
    Raised by admission control when a caller already has a conversion in
    flight. The new request is rejected, never queued.
    """

    pass
