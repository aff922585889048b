"""
Artwork upload handling for Inkquote.

Provides validation helpers and upload storage for the logo files
attached to quote items.
"""
import os
import uuid
from typing import Tuple


class InvalidExtensionError(Exception):
    """Raised when artwork has an unsupported file extension."""
    pass


class FileSizeError(Exception):
    """Raised when file size exceeds maximum allowed size."""
    pass


VECTOR_EXTENSIONS = ["ai", "eps", "svg", "pdf"]
RASTER_EXTENSIONS = ["png", "jpg", "jpeg", "tif", "tiff", "psd"]


def file_extension(filename: str) -> str:
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def validate_extension(filename: str) -> None:
    """
    Validate that artwork is a supported vector or raster format.

    Case-insensitive validation.

    Args:
        filename: Name of file to validate

    Raises:
        InvalidExtensionError: If the extension is not supported

    Example:
        >>> validate_extension("logo.svg")   # OK
        >>> validate_extension("logo.PNG")   # OK
        >>> validate_extension("logo.docx")  # Raises InvalidExtensionError
    """
    if file_extension(filename) not in VECTOR_EXTENSIONS + RASTER_EXTENSIONS:
        allowed = ", ".join(VECTOR_EXTENSIONS + RASTER_EXTENSIONS)
        raise InvalidExtensionError(f"Unsupported artwork format - allowed: {allowed}")


def requires_vectorization(filename: str) -> bool:
    """
    Whether the designer has to redraw this artwork before production.

    Raster files cannot be used for screens or digitization as-is.
    """
    return file_extension(filename) in RASTER_EXTENSIONS


def validate_size(num_bytes: int, max_bytes: int) -> None:
    """
    Validate that file size doesn't exceed maximum.

    Args:
        num_bytes: Size of file in bytes
        max_bytes: Maximum allowed size in bytes

    Raises:
        FileSizeError: If file size exceeds maximum
    """
    if num_bytes > max_bytes:
        max_mb = max_bytes / (1024 * 1024)
        raise FileSizeError(f"File size exceeds {max_mb:.1f}MB limit")


def save_upload(data: bytes, filename: str, uploads_dir: str) -> Tuple[str, str]:
    """
    Store an uploaded artwork file under a fresh UUID.

    Args:
        data: File content
        filename: Original file name (its extension is kept)
        uploads_dir: Target directory, created if missing

    Returns:
        Tuple of (file_id, stored_path)
    """
    os.makedirs(uploads_dir, exist_ok=True)

    file_id = str(uuid.uuid4())
    extension = file_extension(filename)
    stored_path = os.path.join(uploads_dir, f"{file_id}.{extension}" if extension else file_id)

    with open(stored_path, "wb") as f:
        f.write(data)

    return file_id, stored_path
