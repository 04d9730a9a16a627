"""Multipart helpers shared by the upload endpoints."""

from fastapi import HTTPException, UploadFile, status

from src.components.imaging import ImageUpload


def read_image_upload(file: UploadFile | None) -> ImageUpload | None:
    """Read an optional image part; an empty part means no upload."""
    if file is None or not file.filename:
        return None
    data = file.file.read()
    return ImageUpload(
        data=data,
        filename=file.filename,
        content_type=file.content_type or "application/octet-stream",
    )


def field_errors(errors: list) -> list[dict[str, str | None]]:
    """Serialise component validation errors for an HTTP detail payload."""
    return [{"code": e.code, "message": e.message, "field": e.field} for e in errors]


def bad_request(errors: list) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=field_errors(errors))


def unavailable(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=message)
