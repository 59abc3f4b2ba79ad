from enum import StrEnum


class CategoryAttributeType(StrEnum):
    """
    Enumeration for the input types of a category's custom product attributes

    Attributes:
        TEXT: Free text value.
        NUMBER: Numeric value.
        SELECT: One value out of the attribute's options.
        MULTISELECT: Any number of values out of the attribute's options.
        BOOLEAN: Yes/no value.
    """

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTISELECT = "multiselect"
    BOOLEAN = "boolean"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"
