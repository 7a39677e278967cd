"""
BaseService -- abstract base for kernel services.

Responsibility:
    Common constructor and session-handling contract for every service that
    writes through the ORM.  Services receive a SQLAlchemy ``Session`` and
    use ``session.flush()`` only.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries belong to the caller (``session_scope()`` or a
      batch SAVEPOINT).  A service never commits or rolls back.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from workshop_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session):
        self.session = session
