from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession

_DEPTH_KEY = "transaction_depth"


def in_transaction(session: AsyncSession) -> bool:
    """Whether ``session`` is running inside a :class:`Transaction` block."""
    return session.info.get(_DEPTH_KEY, 0) > 0


class Transaction:
    """
    Async context manager marking a unit of work on a session.

    Repositories only flush while a transaction is open on their session; the
    outermost block commits on success and rolls back when an exception escapes.
    Other sessions keep committing on their own.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self) -> AsyncSession:
        self.session.info[_DEPTH_KEY] = self.session.info.get(_DEPTH_KEY, 0) + 1
        return self.session

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                await self.session.commit()
            else:
                await self.session.rollback()
        finally:
            self.session.info[_DEPTH_KEY] -= 1
