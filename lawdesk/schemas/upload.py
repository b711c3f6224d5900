"""Direct-upload API schemas (initiate / finalize)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _id_field(**kwargs):
    return Field(
        default=None, min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$", **kwargs
    )


class InitiateUploadRequest(BaseModel):
    """Request body for POST /uploads/initiate. Exactly one of document_id / case_id."""

    model_config = ConfigDict(extra="forbid")

    filename: str = Field(..., min_length=1, max_length=256)
    file_size: int = Field(..., gt=0, description="Declared byte size")
    content_type: str | None = Field(default=None, max_length=255)
    document_id: str | None = _id_field()
    case_id: str | None = _id_field()
    title: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=64)
    notes: str | None = Field(default=None, max_length=20000)
    intent_id: str | None = Field(
        default=None,
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z0-9_-]+$",
        description="Client-chosen id; retrying with the same id resumes the intent",
    )

    @model_validator(mode="after")
    def _one_target(self) -> "InitiateUploadRequest":
        if (self.document_id is None) == (self.case_id is None):
            raise ValueError("Provide exactly one of document_id or case_id")
        return self


class InitiateUploadResponse(BaseModel):
    """Response for POST /uploads/initiate (201)."""

    model_config = ConfigDict(from_attributes=True)

    intent_id: str
    upload_url: str
    upload_method: str
    upload_headers: dict[str, str]
    key: str
    case_id: str
    document_id: str
    expected_version: int
    expected_file_size: int
    expected_content_type: str
    expires_at: datetime


class FinalizeUploadRequest(BaseModel):
    """Request body for POST /uploads/finalize."""

    model_config = ConfigDict(extra="forbid")

    document_id: str = Field(..., min_length=1, max_length=64)
    expected_version: int = Field(..., ge=1, le=10000)
    key: str = Field(..., min_length=1, max_length=1024)
    filename: str = Field(..., min_length=1, max_length=256)
    intent_id: str | None = Field(default=None, min_length=1, max_length=64)
    case_id: str | None = Field(default=None, min_length=1, max_length=64)
    expected_file_size: int | None = Field(default=None, gt=0)
    expected_content_type: str | None = Field(default=None, max_length=255)
    title: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=64)
    notes: str | None = Field(default=None, max_length=20000)


class FinalizeUploadResponse(BaseModel):
    """Response for POST /uploads/finalize."""

    model_config = ConfigDict(from_attributes=True)

    document_id: str
    version: int
    document_version_id: str | None = None
    idempotent: bool = False
