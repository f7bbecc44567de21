"""Base model for MongoDB documents.

Documents are pydantic models whose ``id`` maps to the ``_id`` field.
ObjectIds stay ObjectIds in Python mode and serialize as hex strings in
JSON mode.
"""

from typing import Annotated, Any, Self

from bson import ObjectId
from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    WithJsonSchema,
)

from cocoon.core.exceptions import InvalidObjectIdError


def _validate_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError("Invalid ObjectId")


PyObjectId = Annotated[
    ObjectId,
    PlainValidator(_validate_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
    WithJsonSchema({"type": "string", "pattern": "^[0-9a-f]{24}$"}),
]


def parse_object_id(value: str | None, message: str = "Invalid identifier") -> ObjectId:
    """Convert a client-supplied id, raising a 400-class error when malformed."""
    if not value or not ObjectId.is_valid(value):
        raise InvalidObjectIdError(message)
    return ObjectId(value)


class Document(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")

    @classmethod
    def from_mongo(cls, doc: dict[str, Any] | None) -> Self | None:
        if doc is None:
            return None
        return cls.model_validate(doc)

    def to_mongo(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# Read schemas expose identifiers as plain strings.
ObjectIdStr = Annotated[str, BeforeValidator(str)]
