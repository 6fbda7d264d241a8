"""
Response Showcase — Multipart File Upload Route
=================================================

What:  POST /part-06 accepts one file (required) and a description (optional)
       and reports what was received.
Why:   Demonstrates multipart binding: text parts arrive as strings, file
       parts as UploadedFile values, both validated by the same engine.

Request Flow:
    1. Client sends multipart/form-data with a 'file' part (+ 'description')
    2. The binder decodes the parts in memory; nothing is written to disk
    3. Validation fails with NoFileProvided when the file part is missing
    4. The handler logs the file metadata and echoes it as fileInfo

Conventions:
    - An absent or empty description is OMITTED from fileInfo, never null
    - The payload itself is never echoed or stored; it is dropped when the
      request finishes
"""

import logging
from typing import Any, Dict

from showcase.config import settings
from showcase.routes.dispatch import VALIDATION_ERROR_RESPONSE, ContractContext, ok
from showcase.schemas import fields as f
from showcase.schemas.fields import ObjectSchema
from showcase.services.binder import MULTIPART_MEDIA_TYPE, UploadedFile
from showcase.services.registry import ContractRouter, HandlerResult, RequestBody, ResponseSpec

logger = logging.getLogger(__name__)

router = ContractRouter(tags=["Upload"])

UPLOAD_SCHEMA = ObjectSchema({
    "file": f.binary().max_size(settings.max_upload_size).describe("アップロードするファイル"),
    "description": f.string().optional().describe("ファイルの説明（オプション）"),
})

UPLOAD_ACCEPTED_SCHEMA = ObjectSchema({
    "success": f.boolean(),
    "message": f.string(),
    "fileInfo": f.obj({
        "name": f.string(),
        "size": f.integer(),
        "type": f.string(),
        "description": f.string().optional(),
    }),
})


@router.contract(
    "POST",
    "/part-06",
    request=RequestBody(MULTIPART_MEDIA_TYPE, UPLOAD_SCHEMA),
    responses={
        200: ResponseSpec("ファイルアップロード成功", UPLOAD_ACCEPTED_SCHEMA),
        400: VALIDATION_ERROR_RESPONSE,
    },
    summary="Upload a file",
)
async def upload_file(values: Dict[str, Any], ctx: ContractContext) -> HandlerResult:
    """Receives a file via multipart/form-data and returns its metadata."""
    upload: UploadedFile = values["file"]
    description = values.get("description")

    logger.info(
        "[%s] Received upload: name=%s, size=%d bytes, type=%s, description=%s",
        ctx.request_id,
        upload.name,
        upload.size,
        upload.media_type,
        description or "なし",
    )

    file_info: Dict[str, Any] = {
        "name": upload.name,
        "size": upload.size,
        "type": upload.media_type,
    }
    if description:
        file_info["description"] = description

    return ok({
        "success": True,
        "message": "ファイルアップロード成功",
        "fileInfo": file_info,
    })
