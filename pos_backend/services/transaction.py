"""
Transaction runner shared by every ledger orchestration.

Each orchestration gets the caller's session, does all of its reads and
writes through it, and is committed or rolled back here as a single unit.
The result is reported as an Outcome instead of a raised exception.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from pos_backend.exceptions import ErrorKind, PosError, InternalError

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of an orchestration: either a value or a taxonomy error."""
    value: Optional[T] = None
    error: Optional[PosError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls, value: T) -> 'Outcome[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: PosError) -> 'Outcome[T]':
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value


def run_in_transaction(session, work: Callable[..., T], *args: Any, operation: str = 'operation', **kwargs: Any) -> Outcome[T]:
    """
    Run work(session, *args, **kwargs) and commit it, all or nothing.

    - PosError: rollback, failed Outcome carrying the error.
    - SQLAlchemyError: rollback, full traceback logged, generic InternalError.
    - Anything else (including cancellation): rollback, then re-raise.
    """
    try:
        value = work(session, *args, **kwargs)
        session.commit()
    except PosError as e:
        session.rollback()
        logger.info(f"{operation} rechazada [{e.kind.value}]: {e.message}")
        return Outcome.failure(e)
    except SQLAlchemyError:
        session.rollback()
        logger.exception(f"{operation}: error de base de datos, transacción revertida")
        return Outcome.failure(InternalError())
    except BaseException:
        session.rollback()
        raise
    return Outcome.success(value)
