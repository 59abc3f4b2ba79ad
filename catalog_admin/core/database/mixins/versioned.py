from sqlmodel import Field, SQLModel


class VersionedMixin(SQLModel):
    """
    Mixin that adds an optimistic concurrency counter to a model.

    Writers read ``version``, then apply their change with a conditional
    update on the value they saw; a mismatch means another writer got there first.

    Attributes:\n
        version (int): Incremented on every guarded write, starts at 1.
    """

    version: int = Field(default=1, nullable=False)
