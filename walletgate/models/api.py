"""API request/response schemas for FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class BeginVerificationRequest(_CamelModel):
    requester_id: str = Field(alias="requesterId", min_length=1)
    display_name: str = Field(alias="displayName", min_length=1)
    wallet: str | None = None


class BeginVerificationResponse(_CamelModel):
    success: bool = True
    already_verified: bool = Field(default=False, serialization_alias="alreadyVerified")
    message: str | None = None
    signer_url: str | None = Field(default=None, serialization_alias="signerUrl")
    workspace: str | None = None


class SignatureSubmission(_CamelModel):
    requester_id: str = Field(alias="requesterId", min_length=1)
    signature: str = Field(min_length=1)


class SignatureResponse(_CamelModel):
    success: bool = True
    wallet: str


class ErrorResponse(BaseModel):
    error: str
    code: str
