"""
Uniform result for business operations invoked from forms.

Managers raise HelpdeskError subclasses; the @action decorator turns the
outcome into an ActionResult so routes only have to flash and redirect.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from helpdesk import db
from helpdesk.business.core.errors import HelpdeskError
from helpdesk.logger import get_logger

logger = get_logger("helpdesk.business.core.action")


@dataclass
class ActionResult:
    success: bool
    error: Optional[str] = None
    id: Optional[int] = None
    url: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, id: Optional[int] = None, url: Optional[str] = None, **data) -> "ActionResult":
        return cls(success=True, id=id, url=url, data=data)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


def action(name: str) -> Callable:
    """
    Wrap a manager method so it always returns an ActionResult.

    The wrapped function may return an ActionResult, a model instance (its id is
    reported) or None. Domain and database errors roll back the session and are
    reported as failures; anything else propagates.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> ActionResult:
            try:
                outcome = func(*args, **kwargs)
            except HelpdeskError as e:
                db.session.rollback()
                logger.warning(f"{name} rejected: {e}")
                return ActionResult.fail(str(e))
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error(f"{name} failed with database error: {e}", exc_info=True)
                return ActionResult.fail(str(getattr(e, 'orig', None) or e))

            if isinstance(outcome, ActionResult):
                return outcome
            if outcome is None:
                return ActionResult.ok()
            return ActionResult.ok(id=getattr(outcome, 'id', None))
        return wrapper
    return decorator
