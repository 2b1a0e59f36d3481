"""
Error taxonomy for the bank account service.

Every error carries the HTTP status the API layer answers with. Business
errors describe expected rule violations and are raised where they are
detected; GeneralApplicationError wraps anything unexpected behind an opaque
tracking id.
"""

import uuid
from typing import Optional

from fastapi import status


class ApplicationError(Exception):
    """Base class for errors translated into HTTP responses."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BusinessError(ApplicationError):
    """A business rule was violated by the request."""

    status_code = status.HTTP_400_BAD_REQUEST


class EntityAlreadyExistsError(BusinessError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, entity_name: object):
        super().__init__(f"Account '{entity_name}' already exists")


class EntityNotFoundError(BusinessError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity_id: object, entity: str = "Account"):
        super().__init__(f"{entity} {entity_id} not found")


class EntityInUseError(BusinessError):
    """The entity is still referenced by ledger rows and cannot be removed."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, entity_id: object):
        super().__init__(f"Account {entity_id} has transaction history and cannot be deleted")


class InvalidAccountError(BusinessError):
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientBalanceError(BusinessError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Insufficient balance to complete the transaction"):
        super().__init__(message)


class SameAccountTransactionError(BusinessError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("Cannot transfer to the same account")


class InvalidArgumentError(BusinessError):
    status_code = status.HTTP_400_BAD_REQUEST


class GeneralApplicationError(ApplicationError):
    """
    Unexpected failure. The message only exposes the tracking id; the cause
    is logged server-side under the same id.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error_id: Optional[str] = None):
        self.error_id = error_id or uuid.uuid4().hex
        super().__init__(
            f"An unexpected error occurred. Reference {self.error_id} when contacting support."
        )
