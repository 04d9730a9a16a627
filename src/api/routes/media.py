"""Serves stored banners and testimonial images under the public media path."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from src.api.deps import get_object_store
from src.api.uploads import unavailable
from src.core.ports.storage import KeyNotFoundError, ObjectStorePort, StorageError

router = APIRouter()


@router.get("/{key:path}")
def get_media(key: str, storage: ObjectStorePort = Depends(get_object_store)) -> Response:
    try:
        data, obj = storage.get_object(key)
    except KeyNotFoundError as e:
        raise HTTPException(status_code=404, detail="Media not found") from e
    except StorageError as e:
        raise unavailable(f"Could not read media: {e}") from e

    return Response(
        content=data,
        media_type=obj.content_type,
        headers={"Cache-Control": "public, max-age=31536000, immutable", "ETag": obj.etag},
    )
