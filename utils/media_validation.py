"""Validation helpers for uploaded and streamed images."""

import base64
import binascii

from fastapi import HTTPException, UploadFile

ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
}


def decode_base64_image(data: str) -> bytes:
    """Return raw bytes from base64 text, accepting an optional data-URL prefix.

    Raises:
        ValueError: If the payload is empty or not valid base64.
    """
    text = (data or "").strip()
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    if not text:
        raise ValueError("Image payload is required.")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image payload must be base64-encoded.") from exc


def validate_image_file(image_file: UploadFile) -> str:
    """Return the normalized MIME type of an uploaded image, or raise 415."""
    if not image_file.content_type:
        return "image/jpeg"
    content_type = image_file.content_type.lower().split(";", 1)[0].strip()
    if content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=415, detail=f"Unsupported image content type: {image_file.content_type}")
    return "image/jpeg" if content_type == "image/jpg" else content_type


async def read_image_bytes(image_file: UploadFile) -> bytes:
    """Read validated image bytes, ensuring the upload is not empty."""
    validate_image_file(image_file)
    image_bytes = await image_file.read()
    if not image_bytes:
        raise HTTPException(status_code=400, detail="Image file is required")
    return image_bytes
