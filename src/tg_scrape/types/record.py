from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Locators with this prefix only live inside the page that created them
BLOB_URL_PREFIX = "blob:"


class Record(BaseModel):
    """One captured feed entry.

    Python attribute names are snake_case; exports use the serialized
    (camelCase) names via ``export_dict()``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    sender: str = ""
    timestamp: str = ""
    text: str = ""
    media: list[str] = Field(default_factory=list)
    forwarded_from: str = Field(default="", alias="forwardedFrom")
    reply_to: str = Field(default="", alias="replyTo")

    @field_validator("media")
    @classmethod
    def drop_volatile_media(cls, value: list[str]) -> list[str]:
        return [url for url in value if url and not url.startswith(BLOB_URL_PREFIX)]

    def export_dict(self) -> dict[str, Any]:
        """Serialized field names, in declaration order."""
        return self.model_dump(by_alias=True)
