from .base import ConflictError, InvalidOperationError, NotFoundError


class CategoryNotFoundError(NotFoundError):
    """
    This error is raised when a category id does not resolve to a category.
    """

    type_ = "category_not_found"
    title = "Category Not Found"
    detail = "The requested category does not exist"


class CategoryAlreadyExistsError(ConflictError):
    """
    This error is raised when a category name is already taken (case-insensitive).
    """

    type_ = "category_already_exists"
    title = "Category Already Exists"
    detail = "Category name already exists"


class CategoryHasProductsError(ConflictError):
    """
    This error is raised when deleting a category that products still reference.
    """

    type_ = "category_has_products"
    title = "Category Has Products"
    detail = "Category has products. Provide a category to move them to before deleting."


class CategoryHasChildrenError(ConflictError):
    """
    This error is raised when deleting a category that still has child categories.
    """

    type_ = "category_has_children"
    title = "Category Has Children"
    detail = "Category has child categories. Provide a new parent (or 'root') to move them to before deleting."


class CategoryVersionConflictError(ConflictError):
    """
    This error is raised when a category was changed by someone else since it was read.
    """

    type_ = "category_version_conflict"
    title = "Category Modified Concurrently"
    detail = "The category was modified by another request. Reload it and try again."


class CategorySelfParentError(InvalidOperationError):
    """
    This error is raised when a category is assigned as its own parent.
    """

    type_ = "category_self_parent"
    title = "Invalid Parent Category"
    detail = "Category cannot be its own parent"


class CategoryCycleError(InvalidOperationError):
    """
    This error is raised when a category would become a descendant of itself.
    """

    type_ = "category_cycle"
    title = "Invalid Parent Category"
    detail = "Cannot set a descendant category as parent"


class InvalidReassignmentTargetError(InvalidOperationError):
    """
    This error is raised when products or children are moved onto the category being deleted or its subtree.
    """

    type_ = "invalid_reassignment_target"
    title = "Invalid Reassignment Target"
    detail = "Cannot move dependents to the category being deleted or one of its descendants"
