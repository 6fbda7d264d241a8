"""
Response Showcase — Schema-Validated JSON Route
=================================================

What:  POST /part-05 accepts a JSON user object and echoes it back.
Why:   Demonstrates contract-driven validation: the same schema validates the
       body, shapes the response and appears in the OpenAPI document.

Request:  {"name": "太郎", "email": "taro@example.com", "age": 25}
Response: 200 {"success": true, "message": "バリデーション成功", "data": {...}}
          400 {"success": false, "error": "バリデーションエラー", "details": {...}}
"""

import logging
from typing import Any, Dict

from showcase.routes.dispatch import VALIDATION_ERROR_RESPONSE, ContractContext, ok
from showcase.schemas import fields as f
from showcase.schemas.fields import ObjectSchema
from showcase.services.binder import JSON_MEDIA_TYPE
from showcase.services.registry import ContractRouter, HandlerResult, RequestBody, ResponseSpec

logger = logging.getLogger(__name__)

router = ContractRouter(tags=["Validation"])

USER_SCHEMA = ObjectSchema({
    "name": f.string().min_length(1).max_length(100).describe("ユーザー名", example="太郎"),
    "email": f.string().email().describe("メールアドレス", example="taro@example.com"),
    "age": f.integer().min(0).max(150).describe("年齢", example=25),
})

USER_ACCEPTED_SCHEMA = ObjectSchema({
    "success": f.boolean(),
    "message": f.string(),
    "data": f.obj({
        "name": f.string(),
        "email": f.string(),
        "age": f.integer(),
    }),
})


@router.contract(
    "POST",
    "/part-05",
    request=RequestBody(JSON_MEDIA_TYPE, USER_SCHEMA),
    responses={
        200: ResponseSpec("成功レスポンス", USER_ACCEPTED_SCHEMA),
        400: VALIDATION_ERROR_RESPONSE,
    },
    summary="Validate a user object",
)
async def validate_user(values: Dict[str, Any], ctx: ContractContext) -> HandlerResult:
    """Validates the JSON body against the user schema and echoes it back."""
    logger.info("[%s] User payload accepted: name=%s", ctx.request_id, values["name"])
    return ok({
        "success": True,
        "message": "バリデーション成功",
        "data": values,
    })
