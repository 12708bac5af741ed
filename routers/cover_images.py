# routers/cover_images.py

import re
import time

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from core.config import settings
from core.errors import backend_error, client_unavailable
from core.logging_config import logger
from core.permission_helpers import requires_capability
from core.permissions import Capability
from core.supabase_client import get_supabase_client
from models.enums import AuditAction, AuditSeverity, ResourceType
from models.identity import Identity
from services.audit_log import log_audit_event
from services.data_service import fetch_active_cover_image, fetch_cover_images


router = APIRouter(
    prefix="/cover-images",
    tags=["Cover Images"],
)


STORAGE_FOLDER = "cover-images"


# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def safe_filename(filename: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", filename)


def storage_path_for(filename: str) -> str:
    """cover-images/<epoch ms>-<name>, unique per upload."""
    return f"{STORAGE_FOLDER}/{int(time.time() * 1000)}-{safe_filename(filename)}"


def storage_path_from_url(image_url: str) -> str:
    return f"{STORAGE_FOLDER}/{image_url.rstrip('/').split('/')[-1]}"


def _client():
    client = get_supabase_client()
    if not client:
        raise client_unavailable()
    return client


def _deactivate_current(client):
    client.table("cover_images").update({"is_active": False}).eq("is_active", True).execute()


# -----------------------------------------------------
# PUBLIC - currently active cover image
# -----------------------------------------------------
@router.get("/active", summary="Active cover image (public)")
def active_cover_image():
    client = _client()
    try:
        image = fetch_active_cover_image(client)
    except Exception as e:
        raise backend_error(e, "Failed to load cover image") from e
    return {"image": image}


# -----------------------------------------------------
# LIST ALL COVER IMAGES
# -----------------------------------------------------
@router.get("", summary="List cover images")
def list_cover_images(identity: Identity = Depends(requires_capability(Capability.manage_cover_image))):
    client = _client()
    try:
        images = fetch_cover_images(client)
    except Exception as e:
        raise backend_error(e, "Failed to load cover images") from e
    return {"images": images, "total": len(images)}


# -----------------------------------------------------
# UPLOAD + SAVE AS ACTIVE
# -----------------------------------------------------
@router.post("", summary="Upload a cover image and make it active")
def upload_cover_image(
    file: UploadFile = File(...),
    name: str = Form(None),
    identity: Identity = Depends(requires_capability(Capability.manage_cover_image)),
):
    if not file.filename:
        raise HTTPException(400, "A file is required")

    content_type = file.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise HTTPException(400, "Only image uploads are accepted")

    client = _client()
    path = storage_path_for(file.filename)
    bucket = client.storage.from_(settings.COVER_IMAGE_BUCKET)

    try:
        contents = file.file.read()
        bucket.upload(
            path=path,
            file=contents,
            file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
        )
        image_url = bucket.get_public_url(path)
    except Exception as e:
        raise backend_error(e, "Failed to upload cover image") from e

    try:
        _deactivate_current(client)
        result = (
            client.table("cover_images")
            .insert({
                "name": name or file.filename,
                "image_url": image_url,
                "is_active": True,
                "created_by": identity.id,
            })
            .execute()
        )
    except Exception as e:
        raise backend_error(e, "Failed to save cover image") from e

    image = (result.data or [{}])[0]
    log_audit_event(
        identity,
        AuditAction.cover_image_uploaded,
        ResourceType.cover_image,
        image.get("id"),
        details={"path": path},
        client=client,
    )
    return {"success": True, "image": image, "url": image_url}


# -----------------------------------------------------
# ACTIVATE AN EXISTING IMAGE
# -----------------------------------------------------
@router.put("/{image_id}/activate", summary="Make an existing cover image active")
def activate_cover_image(
    image_id: str,
    identity: Identity = Depends(requires_capability(Capability.manage_cover_image)),
):
    client = _client()

    try:
        _deactivate_current(client)
        result = (
            client.table("cover_images")
            .update({"is_active": True})
            .eq("id", image_id)
            .execute()
        )
    except Exception as e:
        raise backend_error(e, "Failed to activate cover image") from e

    if not result.data:
        raise HTTPException(404, "Cover image not found")

    log_audit_event(
        identity,
        AuditAction.cover_image_activated,
        ResourceType.cover_image,
        image_id,
        client=client,
    )
    return {"success": True, "image": result.data[0]}


# -----------------------------------------------------
# DELETE (storage object, then row)
# -----------------------------------------------------
@router.delete("/{image_id}", summary="Delete a cover image")
def delete_cover_image(
    image_id: str,
    identity: Identity = Depends(requires_capability(Capability.manage_cover_image)),
):
    client = _client()

    try:
        rows = (
            client.table("cover_images")
            .select("id, image_url")
            .eq("id", image_id)
            .limit(1)
            .execute()
            .data
        )
    except Exception as e:
        raise backend_error(e, "Failed to load cover image") from e

    if not rows:
        raise HTTPException(404, "Cover image not found")

    image_url = rows[0].get("image_url") or ""
    if image_url:
        try:
            client.storage.from_(settings.COVER_IMAGE_BUCKET).remove([storage_path_from_url(image_url)])
        except Exception as e:
            # Row deletion continues regardless
            logger.warning(f"Storage removal failed for cover image {image_id}: {e}")

    try:
        client.table("cover_images").delete().eq("id", image_id).execute()
    except Exception as e:
        raise backend_error(e, "Failed to delete cover image") from e

    log_audit_event(
        identity,
        AuditAction.cover_image_deleted,
        ResourceType.cover_image,
        image_id,
        severity=AuditSeverity.medium,
        client=client,
    )
    return {"success": True, "deleted": image_id}
