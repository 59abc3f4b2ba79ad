import re
import time
from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import TypeVar

from catalog_admin.core.constants import PATH_SEPARATOR

T = TypeVar("T")
N = TypeVar("N")

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(value: str, max_length: int | None = None) -> str:
    """
    Build a URL slug: lowercase, runs of non-alphanumerics collapsed to one hyphen, edges trimmed.

    Args:
        value (str): The text to slugify, usually a category name
        max_length (int | None): Truncate the slug to this many characters

    Returns:
        str: The slug, possibly empty when the value has no alphanumerics
    """

    slug = _NON_ALPHANUMERIC.sub("-", value.lower()).strip("-")

    if max_length is not None and len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")

    return slug


def disambiguate_slug(slug: str, max_length: int | None = None, now: Callable[[], float] = time.time) -> str:
    """Suffix the slug with the current epoch milliseconds, shortening the base to fit ``max_length``."""
    suffix = f"-{int(now() * 1000)}"

    if max_length is not None and len(slug) + len(suffix) > max_length:
        slug = slug[: max(max_length - len(suffix), 0)].rstrip("-")

    return f"{slug}{suffix}"


def split_path(materialized_path: str | None) -> list[str]:
    """Turn a stored ``"a,b,c"`` path into ``["a", "b", "c"]``."""
    if not materialized_path:
        return []
    return [segment for segment in materialized_path.split(PATH_SEPARATOR) if segment]


def join_path(ids: Iterable[str]) -> str:
    return PATH_SEPARATOR.join(str(i) for i in ids)


def child_path(parent_path: Sequence[str] | None, parent_id: str | None) -> list[str]:
    """
    Path of a node placed under ``parent_id``: the parent's path plus the parent itself.

    Roots (no parent) have an empty path.
    """
    if parent_id is None:
        return []
    return [*(parent_path or []), str(parent_id)]


def level_for(path: Sequence[str]) -> int:
    return len(path)


def subtree_prefix(path: Sequence[str], node_id: str) -> str:
    """The stored path every descendant of ``node_id`` starts with."""
    return join_path([*path, str(node_id)])


def rebase_path(path: Sequence[str], old_prefix: Sequence[str], new_prefix: Sequence[str]) -> list[str]:
    """
    Replace the leading ``old_prefix`` of ``path`` with ``new_prefix``.

    Raises:
        ValueError: If ``path`` does not start with ``old_prefix``
    """
    old_prefix = list(old_prefix)
    if list(path[: len(old_prefix)]) != old_prefix:
        raise ValueError(f"Path {list(path)} does not start with {old_prefix}")
    return [*new_prefix, *path[len(old_prefix) :]]


def build_forest(
    items: Iterable[T],
    *,
    make_node: Callable[[T, list[N]], N],
    key: Callable[[T], Hashable],
    parent_key: Callable[[T], Hashable | None],
) -> list[N]:
    """
    Group items by parent and assemble the forest starting from parentless items.

    The relative order of ``items`` is preserved among siblings. Items whose
    parent is not part of ``items`` are unreachable and left out.
    """
    children_of: dict[Hashable | None, list[T]] = defaultdict(list)
    for item in items:
        children_of[parent_key(item)].append(item)

    def assemble(parent: Hashable | None) -> list[N]:
        return [make_node(item, assemble(key(item))) for item in children_of.get(parent, [])]

    return assemble(None)
