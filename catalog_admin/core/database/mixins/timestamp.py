from datetime import datetime, timezone

from sqlalchemy import TIMESTAMP
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin(SQLModel):
    """
    Mixin that adds created and updated datetime columns to a model

    Attributes:\n
        created_datetime (datetime): The datetime when the record was created.
        updated_datetime (datetime | None): The datetime when the record was last updated.
    """

    created_datetime: datetime = Field(
        default_factory=utc_now,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore
        nullable=False,
    )
    updated_datetime: datetime | None = Field(
        default=None,
        sa_type=TIMESTAMP(timezone=True),  # type: ignore
        nullable=True,
        sa_column_kwargs={"onupdate": utc_now},
    )
