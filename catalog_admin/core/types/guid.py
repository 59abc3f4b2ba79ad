import base64
import re
from typing import Any, ClassVar
from uuid import uuid4

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import PydanticCustomError, core_schema


class GUID(str):
    """
    Pydantic type for catalog resource ids.\n

    GUIDs follow the format: gid://catalog-admin/{ResourceType}/{base64_encoded_uuid}

    The encoded part is unpadded standard base64, which never contains the
    comma used to join ids into a materialized category path.
    """

    _APP_NAME: ClassVar[str] = "catalog-admin"
    _PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"^gid://(?P<app>[a-z0-9-]+)/(?P<type>[A-Za-z0-9_]+)/(?P<id>[A-Za-z0-9+/]+)$"
    )

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls.validate,
            core_schema.str_schema(strip_whitespace=True, min_length=1),
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        json_schema = handler(schema)
        json_schema.update(
            type="string",
            pattern=cls._PATTERN.pattern,
            example=f"gid://{cls._APP_NAME}/Category/3q2+7wAAAAAAAAAAAAAAAA",
        )
        return json_schema

    @classmethod
    def validate(cls, value: str) -> "GUID":
        match = cls._PATTERN.match(value)
        if match is None:
            raise PydanticCustomError(
                "guid_format",
                "Invalid GUID '{value}', expected gid://{app}/ResourceType/id",
                {"value": value, "app": cls._APP_NAME},
            )
        return cls(value)

    @classmethod
    def encode_guid(cls, resource_type: str) -> "GUID":
        """
        Generate a new GUID for a resource type such as ``"Category"`` or ``"Product"``.
        """
        encoded_id = base64.b64encode(uuid4().bytes).decode("ascii").rstrip("=")
        return cls(f"gid://{cls._APP_NAME}/{resource_type}/{encoded_id}")

    def __repr__(self) -> str:
        return f"GUID('{str(self)}')"
