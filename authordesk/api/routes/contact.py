"""
Public contact form endpoint.

Endpoints:
- GET /api/contact - readiness check used by the site
- POST /api/contact - store a message with optional attachments
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status

from authordesk.api.deps import get_client_ip, get_context
from authordesk.api.schemas import ContactResponse, ErrorResponse
from authordesk.app_shell.context import ServiceContext
from authordesk.components.activity import UserContext
from authordesk.components.messages import SubmitMessageInput, run_submit
from authordesk.domain.uploads import FileUpload

logger = logging.getLogger(__name__)

router = APIRouter()

_BACKEND_CODES = {"save_failed"}


@router.get("", response_model=ContactResponse)
def contact_ready() -> ContactResponse:
    return ContactResponse(success=True, message="Contact API is ready")


@router.post(
    "",
    response_model=ContactResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid submission"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Message could not be stored"},
    },
    summary="Submit the contact form",
)
async def submit_contact(
    request: Request,
    full_name: str = Form("", alias="fullName"),
    email: str = Form(""),
    purpose: str = Form(""),
    message: str = Form(""),
    attachments: list[UploadFile] | None = File(None, alias="attachments[]"),
    ctx: ServiceContext = Depends(get_context),
) -> ContactResponse:
    client_ip = get_client_ip(request)
    user_ctx = UserContext(ip_address=client_ip, user_agent=request.headers.get("user-agent"))

    if not ctx.rate_limiter.check_contact(client_ip):
        logger.warning("Contact rate limit hit for %s", client_ip)
        window = ctx.rules.rate_limit.contact.window_seconds
        retry = ctx.rate_limiter.retry_after(f"contact:{client_ip}", window)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many submissions. Please try again later.",
            headers={"Retry-After": str(retry)},
        )

    uploads = [
        FileUpload(
            filename=f.filename or "attachment",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in attachments or []
        if f.filename
    ]

    result = run_submit(
        SubmitMessageInput(
            full_name=full_name,
            email=email,
            purpose=purpose,
            message=message,
            attachments=uploads,
        ),
        repo=ctx.message_repo,
        storage=ctx.storage,
        time=ctx.clock,
        config=ctx.configs.messages,
    )

    if not result.success or result.message is None:
        detail = "; ".join(e.message for e in result.errors) or "Invalid submission"
        if any(e.code in _BACKEND_CODES for e in result.errors):
            ctx.activity.log_error("contact_submission", detail, {"email": email}, user_ctx)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to submit contact form",
            )
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    stored = result.message
    ctx.activity.log_contact_submission(
        str(stored.id), stored.email, stored.purpose, len(stored.attachments), user_ctx
    )
    for attachment in stored.attachments:
        ctx.activity.log_file_upload(
            attachment.file_name,
            attachment.file_size,
            ctx.configs.messages.bucket,
            context=user_ctx,
        )
    for failed in result.attachment_failures:
        size = next((u.size for u in uploads if u.filename == failed), 0)
        ctx.activity.log_file_upload(
            failed, size, ctx.configs.messages.bucket, success=False, context=user_ctx
        )

    return ContactResponse(success=True, message="Message sent successfully!")
