# Overview: Transactional data-access object handed to every service at construction.

"""
DataStore wraps one SQLAlchemy session and gives services a small,
uniform data-access surface:

- find_one / find_many / get / query for reads
- create / update / conditional_update for writes
- transaction() for multi-row atomicity (commit on success, roll back
  every write on any exception, nested calls join the outer one)

Database failures are classified at this boundary:
- IntegrityError  -> ConflictError (unique constraint, duplicate rows)
- OperationalError / pool timeout -> TransientError (store unavailable)

Services receive a DataStore instead of reaching for a module-level
session, so tests can hand them any session they like.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any

from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ..errors import ConflictError, NotFoundError, TransientError


class DataStore:
    def __init__(self, session):
        self.session = session
        self._depth = 0

    # -- reads -------------------------------------------------------------

    def query(self, *entities):
        return self.session.query(*entities)

    def get(self, model, ident, *, refresh: bool = False):
        with self._classified():
            return self.session.get(model, ident, populate_existing=refresh)

    def get_or_404(self, model, ident, message: str | None = None):
        obj = self.get(model, ident)
        if obj is None:
            raise NotFoundError(message or f"{model.__name__} not found")
        return obj

    def find_one(self, model, *criteria, **filters):
        with self._classified():
            return self.session.query(model).filter(*criteria).filter_by(**filters).first()

    def find_many(self, model, *criteria, order_by=None, **filters) -> list:
        with self._classified():
            query = self.session.query(model).filter(*criteria).filter_by(**filters)
            if order_by is not None:
                query = query.order_by(*(order_by if isinstance(order_by, (list, tuple)) else [order_by]))
            return query.all()

    def count(self, model, *criteria, **filters) -> int:
        with self._classified():
            return self.session.query(model).filter(*criteria).filter_by(**filters).count()

    # -- writes ------------------------------------------------------------

    def create(self, model, **data):
        """Insert one row and flush so its id is available."""
        obj = model(**data)
        with self._classified():
            self.session.add(obj)
            self.session.flush()
        return obj

    def update(self, model, filters: dict, **values):
        """Update exactly one row matched by filters; NotFoundError if none."""
        obj = self.find_one(model, **filters)
        if obj is None:
            raise NotFoundError(f"{model.__name__} not found")
        for key, value in values.items():
            setattr(obj, key, value)
        with self._classified():
            self.session.flush()
        return obj

    def conditional_update(self, model, criteria: list, values: dict[str, Any]) -> int:
        """
        Single UPDATE ... WHERE <criteria> statement. Returns rows affected.

        The check and the write happen in one statement, so callers use the
        row count (0 = condition not met) instead of a separate read.
        Objects already loaded in the session are not synchronized: reload
        them with get(..., refresh=True) when the new state is needed.
        """
        stmt = sa_update(model).where(*criteria).values(**values).execution_options(synchronize_session=False)
        with self._classified():
            result = self.session.execute(stmt)
        return result.rowcount

    def flush(self) -> None:
        with self._classified():
            self.session.flush()

    # -- transactions ------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self):
        """
        Atomic unit of work.

        Outermost call commits on success and rolls back on any exception.
        Inner calls only join: the outermost one decides.
        """
        if self._depth:
            self._depth += 1
            try:
                yield self
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            with self._classified():
                yield self
                self.session.commit()
        except BaseException:
            self.session.rollback()
            raise
        finally:
            self._depth = 0

    @contextmanager
    def _classified(self):
        try:
            yield
        except IntegrityError as exc:
            self._rollback_if_standalone()
            raise ConflictError("Resource already exists", details={"constraint": _constraint_hint(exc)}) from exc
        except (OperationalError, PoolTimeoutError) as exc:
            self._rollback_if_standalone()
            raise TransientError() from exc

    def _rollback_if_standalone(self) -> None:
        # Inside transaction() the outermost block owns the rollback
        if not self._depth:
            self.session.rollback()


def _constraint_hint(exc: IntegrityError) -> str:
    text = str(getattr(exc, "orig", exc))
    return text.splitlines()[0][:200] if text else "integrity"
