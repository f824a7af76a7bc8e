from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class InitializeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    root_path: str = Field(alias="rootPath")


class AddFileRequest(BaseModel):
    path: str
    content: str


class ErrorResponse(BaseModel):
    detail: str
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    store: str = "initialized"
