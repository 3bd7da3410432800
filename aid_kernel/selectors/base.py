"""
Module: aid_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
    Selectors are the only code in the consolidation core that talks to the
    store, and they only ever read.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/.  MUST NOT import from engines, services, or outer layers.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses from
      aid_kernel.domain, NOT raw ORM model instances.
    - Session ownership: Selectors do NOT create or manage their own sessions;
      the caller owns the session.  A session is never shared between
      concurrently running selectors.

Failure modes:
    - SQLAlchemyError subclasses (OperationalError, ProgrammingError, ...)
      propagate unchanged; the service layer decides how to classify them.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from aid_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
