from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel


class FileDescriptor(BaseModel):
    path: str
    size: int
    mtime: int
    mimetype: str
    owner: str
    updatable: bool
    file_type: str = "file"
    file_id: str


class ShareRecord(BaseModel):
    id: int | None = None
    file_id: str
    file_type: str
    owner_user_id: str = Field(min_length=1)
    share_with: str | None = None
    token: str = Field(min_length=1)
    expiration: datetime | None = None


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoadResponse(CamelModel):
    file_contents: str
    writable: bool
    mime: str
    mtime: int
    preview_url: str = ""


class SaveRequest(CamelModel):
    path: str = ""
    file_contents: str = ""
    mtime: StrictInt | None = None

    @field_validator("mtime", mode="before")
    @classmethod
    def drop_non_integer_mtime(cls, value):
        # a bool, string or float mtime counts as not supplied
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value


class SaveResponse(BaseModel):
    mtime: int
    size: int


class ErrorResponse(BaseModel):
    message: str
