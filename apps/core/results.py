"""
Typed results returned by every sharing and reservation operation.

Calling code branches on ``result.ok`` and ``result.error`` instead of
catching exceptions. Only store-level failures escape as exceptions.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from django.db import DatabaseError

from .exceptions import ErrorKind, GiftListServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResult:
    ok: bool
    value: Any = None
    error: Optional[ErrorKind] = None
    message: str = ''
    context: dict = field(default_factory=dict)

    @classmethod
    def success(cls, value=None) -> 'ServiceResult':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = '', context=None) -> 'ServiceResult':
        return cls(ok=False, error=error, message=message, context=context or {})

    @classmethod
    def from_exception(cls, exc: GiftListServiceError) -> 'ServiceResult':
        return cls.failure(exc.kind, str(exc), exc.context)

    def __bool__(self):
        return self.ok


def service_result(func):
    """
    Wrap a service so that expected failures come back as a ServiceResult.

    Must be applied outside @transaction.atomic so the exception has already
    rolled the transaction back by the time it is converted.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            value = func(*args, **kwargs)
        except GiftListServiceError as exc:
            logger.info("%s failed: %s (%s)", func.__name__, exc.kind, exc)
            return ServiceResult.from_exception(exc)
        except DatabaseError:
            logger.exception("Store failure in %s", func.__name__)
            raise
        return ServiceResult.success(value)

    return wrapper
