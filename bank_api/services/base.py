"""
Shared service plumbing.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from bank_api.core.exceptions import BusinessError
from bank_api.core.logging_config import get_logger
from bank_api.services.locks import AccountLockRegistry, account_locks


class BaseService:
    """
    Holds the request session and the account lock registry.

    Business errors are logged once here, at the service boundary, and
    re-raised unchanged for the API layer to translate.
    """

    def __init__(self, session: Session, locks: AccountLockRegistry = account_locks):
        self.session = session
        self.locks = locks
        self.logger = get_logger(type(self).__module__)

    @contextmanager
    def reporting(self, operation: str, **context) -> Iterator[None]:
        try:
            yield
        except BusinessError as exc:
            self.logger.warning(
                "business_rule_violation",
                operation=operation,
                error=type(exc).__name__,
                detail=exc.message,
                status_code=exc.status_code,
                **context,
            )
            raise
