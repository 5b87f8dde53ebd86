"""
Tag model

Collection: tags/
Document ID: lowercased tag text
"""

from pydantic import BaseModel, Field, ConfigDict


class Tag(BaseModel):
    key: str
    name: str
    usage_count: int = Field(1, alias="usageCount")

    model_config = ConfigDict(populate_by_name=True)


def tag_key(tag: str) -> str:
    """Case-insensitive identity of a tag."""
    return tag.strip().lower()
