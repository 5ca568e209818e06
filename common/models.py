import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from common.media import MediaKind


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


class CamelModel(BaseModel):
    """Base model that serializes to camelCase JSON and accepts either form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class FileEvent(BaseModel):
    path: str
    kind: MediaKind
    url: str


class ImageFoundEvent(CamelModel):
    image_url: str = Field(min_length=1)
    media_kind: MediaKind = Field(default=MediaKind.IMAGE)


class ImageListing(BaseModel):
    images: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


class HealthStatus(BaseModel):
    status: str = Field(default="ok")
    subscribers: int = Field(default=0)
    watching: str


class DocumentSummary(CamelModel):
    summary: str
    key_points: list[str] = Field(default_factory=list)


class PDFSummary(CamelModel):
    id: str = Field(default_factory=_new_id)
    file_name: str
    summary: str
    key_takeaways: list[str] = Field(default_factory=list)
    created_at: str = Field(default_factory=_now)


class ReferenceImage(CamelModel):
    id: str = Field(default_factory=_new_id)
    file_name: str
    url: str
    created_at: str = Field(default_factory=_now)


class ComicIllustration(CamelModel):
    id: str = Field(default_factory=_new_id)
    summary_id: str
    image_id: str
    url: str = Field(default="")
    created_at: str = Field(default_factory=_now)
