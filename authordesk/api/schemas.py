from pydantic import BaseModel, Field


class ContactResponse(BaseModel):
    """Response for the public contact form."""

    success: bool = Field(..., description="Whether the message was stored")
    message: str = Field(..., description="Human-readable message")


class ErrorResponse(BaseModel):
    detail: str
