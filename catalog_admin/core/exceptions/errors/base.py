from fastapi import status
from fastapi_problem.error import StatusProblem


class ValidationError(StatusProblem):
    """
    This error is raised when the provided input is malformed or incomplete.
    """

    type_ = "validation_error"
    title = "Validation Failed"
    detail = "The provided input is invalid."
    status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)


class NotFoundError(StatusProblem):
    """
    This error is raised when a requested resource is not found.
    """

    type_ = "not_found_error"
    title = "Resource Not Found"
    detail = "The requested resource could not be found."
    status = status.HTTP_404_NOT_FOUND

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)


class ConflictError(StatusProblem):
    """
    This error is raised when a request conflicts with the current state of a resource.
    """

    type_ = "conflict_error"
    title = "Resource Conflict"
    detail = "The request conflicts with the current state of the resource."
    status = status.HTTP_409_CONFLICT

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)


class InvalidOperationError(StatusProblem):
    """
    This error is raised when a well-formed request asks for an operation that is not allowed.
    """

    type_ = "invalid_operation_error"
    title = "Invalid Operation"
    detail = "The requested operation is not allowed."
    status = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)


class InternalServerError(StatusProblem):
    """
    This error is raised when an unexpected internal server error occurs.
    """

    type_ = "internal_server_error"
    title = "Internal Server Error"
    detail = "An unexpected error occurred on the server."
    status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail=None, **kwargs):
        super().__init__(detail=detail or self.detail, **kwargs)
