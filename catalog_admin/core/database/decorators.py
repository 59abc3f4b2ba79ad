import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from catalog_admin.core.database.transaction import Transaction, in_transaction

T = TypeVar("T")


def _resolve_session(func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
    if args and hasattr(args[0], "session"):
        return args[0].session

    if "session" in kwargs:
        return kwargs["session"]

    param_names = list(inspect.signature(func).parameters.keys())
    if "session" not in param_names:
        raise ValueError("Could not find session parameter in function or method")

    session_idx = param_names.index("session")
    if len(args) <= session_idx:
        raise ValueError("Session argument is required but not provided")

    return args[session_idx]


def transactional(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """
    Decorator for executing a coroutine within a transaction.

    The outermost decorated call commits on success and rolls back on error;
    nested decorated calls join the running transaction.

    The function being decorated must have a session parameter or be a method
    of a class with a self.session attribute.

    Usage:
        class CategoryService:
            def __init__(self, session: AsyncSession):
                self.session = session

            @transactional
            async def move_subtree(self, ...):
                ...
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        session = _resolve_session(func, args, kwargs)

        if not isinstance(session, AsyncSession):
            raise TypeError("Session must be an instance of AsyncSession")

        if in_transaction(session):
            return await func(*args, **kwargs)

        async with Transaction(session):
            return await func(*args, **kwargs)

    return wrapper
