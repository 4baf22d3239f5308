"""Structured operation results and the decorator that produces them."""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from config.exceptions import CatalogError, InfrastructureError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


@dataclass
class Result:
    """Outcome of a mutation: success with optional ids, or a failure message."""
    success: bool
    data: Optional[dict] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[dict] = None) -> "Result":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str) -> "Result":
        return cls(success=False, error=message)

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        if self.data is None:
            return {"success": True}
        return {"success": True, "data": dict(self.data)}


def mutation(func: Callable[..., Any]) -> Callable[..., Result]:
    """Turn a raising operation into one that always returns a Result.

    The wrapped function returns a Result on success (or None / a dict of
    ids, which are wrapped). CatalogError messages become the failure text
    verbatim; anything else is logged with its traceback.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Result:
        try:
            outcome = func(*args, **kwargs)
        except InfrastructureError as e:
            logger.error("%s failed: %s", func.__name__, e)
            return Result.fail(e.message)
        except CatalogError as e:
            logger.warning("%s rejected: %s", func.__name__, e)
            return Result.fail(e.message)
        except Exception:
            logger.exception("Unexpected error in %s", func.__name__)
            return Result.fail(UNEXPECTED_ERROR)
        if isinstance(outcome, Result):
            return outcome
        return Result.ok(outcome)

    return wrapper
