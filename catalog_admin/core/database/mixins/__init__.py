from .id import BaseIDMixin, GUIDMixin  # noqa: F401
from .timestamp import TimestampMixin, utc_now  # noqa: F401
from .versioned import VersionedMixin  # noqa: F401
