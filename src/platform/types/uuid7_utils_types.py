"""
https://docs.pydantic.dev/latest/concepts/types/#customizing-validation-with-__get_pydantic_core_schema__

Pydantic integration for uuid_utils.UUID.

Entities carry uuid_utils.UUID (UUIDv7) ids. FastAPI needs a type it can validate
from path/body strings, serialize back to strings and document in OpenAPI:

    class PurchaseRequest(BaseModel):
        order_id: UtilsUUID7
"""

from typing import Any
import uuid

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from uuid_utils import UUID


class UtilsUUID7(UUID):
    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        def _to_uuid(value: Any) -> UUID:
            if isinstance(value, UUID):
                return value
            try:
                return UUID(str(value))
            except Exception as e:
                raise ValueError(f'Invalid UUID: {value}') from e

        from_str = core_schema.chain_schema(
            [
                core_schema.str_schema(),
                core_schema.no_info_plain_validator_function(_to_uuid),
            ]
        )
        return core_schema.json_or_python_schema(
            # JSON has no UUID type: only strings
            json_schema=from_str,
            python_schema=core_schema.no_info_plain_validator_function(_to_uuid),
            serialization=core_schema.plain_serializer_function_ser_schema(
                str,
                when_used='always',
                return_schema=core_schema.str_schema(),
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        # handler(schema) would expand the validator chain into the OpenAPI document
        return {'type': 'string', 'format': 'uuid'}


def to_std_uuid(value: UUID | uuid.UUID | str) -> uuid.UUID:
    """Bind parameter for SQLAlchemy's Uuid column type."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def from_std_uuid(value: uuid.UUID | str) -> UUID:
    return UUID(str(value))
