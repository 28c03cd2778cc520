"""File upload schemas."""

from pydantic import BaseModel, ConfigDict, Field


class FileInfo(BaseModel):
    """Descriptor of an uploaded file, attached to file and image messages."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(description="Stored file name")
    originalname: str = Field(description="Name of the file on the client")
    size: int = Field(ge=0, description="Size in bytes")
    mimetype: str = Field(description="Detected MIME type")
    url: str = Field(description="Public URL of the stored file")
