from typing import Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class MongoModel(BaseModel):
    """Base for records keyed by a string `uuid`, stored as `_id` in MongoDB."""

    uuid: str = Field(alias="_id", serialization_alias="uuid", default_factory=lambda: str(uuid4()))

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_serialization_defaults_required=True,
    )

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump(by_alias=True)
        data["_id"] = data.pop("uuid")  # Rename uuid → _id for MongoDB
        return data

    @classmethod
    def from_mongo(cls, document: dict[str, Any]) -> Self:
        return cls.model_validate(document)
