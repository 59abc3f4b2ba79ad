import inflection
from sqlalchemy.orm import declared_attr
from sqlmodel import Field, SQLModel
from catalog_admin.core.types import GUID


class BaseIDMixin(SQLModel):
    """
    A base mixin for models with a primary key.\n

    The table name is the pluralized snake_case class name (``Category`` -> ``categories``).
    """

    @declared_attr  # type: ignore
    def __tablename__(cls) -> str:  # type: ignore
        return inflection.pluralize(inflection.underscore(cls.__name__))


class GUIDMixin(BaseIDMixin):
    """
    A mixin for models with GUID primary keys.\n

    GUIDs follow the format: gid://{AppName}/{ResourceType}/{base64_encoded_id}

    Attributes:\n
        id (GUID): The GUID primary key field.
    """

    id: GUID = Field(
        default=None,
        primary_key=True,
        index=True,
        nullable=False,
    )

    def __init__(self, **data):
        if "id" not in data or data["id"] is None:
            data["id"] = self.encode_guid()
        super().__init__(**data)

    @classmethod
    def encode_guid(cls) -> GUID:
        """Generate a GUID for this model's resource type."""

        return GUID.encode_guid(resource_type=cls.__name__)
