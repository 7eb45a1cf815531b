import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import ConstraintViolation, Unavailable, UnknownCollection
from .models import (
    Account, BilliardTable, CustomerProfile, DeactivationRecord,
    ProfileMirror, Reservation, SystemLog,
)

log = logging.getLogger(__name__)

COLLECTIONS = {
    "accounts": Account,
    "customer": CustomerProfile,
    "deact_user": DeactivationRecord,
    "profiles": ProfileMirror,
    "system_log": SystemLog,
    "billiard_table": BilliardTable,
    "reservation": Reservation,
}


class DataStore:
    def __init__(self, session):
        self.session = session

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollection(collection) from None

    def _query(self, collection: str, predicate: dict):
        model = self._model(collection)
        stmt = select(model)
        for column, value in predicate.items():
            stmt = stmt.where(getattr(model, column) == value)
        return stmt

    def _fail(self, collection: str, op: str, exc: SQLAlchemyError):
        self.session.rollback()
        log.warning("%s on %s failed: %s", op, collection, exc)
        if isinstance(exc, IntegrityError):
            raise ConstraintViolation(details=str(exc.orig)) from exc
        raise Unavailable(details=str(exc)) from exc

    def find_one(self, collection: str, **predicate):
        """Returns the first matching row or ``None``."""
        try:
            return self.session.execute(self._query(collection, predicate).limit(1)).scalars().first()
        except SQLAlchemyError as e:
            self._fail(collection, "find_one", e)

    def find_many(self, collection: str, order_by: str | None = None, **predicate) -> list:
        stmt = self._query(collection, predicate)
        if order_by:
            stmt = stmt.order_by(getattr(self._model(collection), order_by))
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            self._fail(collection, "find_many", e)

    def insert(self, collection: str, fields: dict):
        row = self._model(collection)(**fields)
        self.session.add(row)
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail(collection, "insert", e)
        return row

    def update(self, collection: str, fields: dict, **predicate) -> int:
        """Applies ``fields`` to every matching row and returns how many changed."""
        if not predicate:
            raise ValueError("update requires a predicate")
        try:
            rows = list(self.session.execute(self._query(collection, predicate)).scalars())
            for row in rows:
                for column, value in fields.items():
                    setattr(row, column, value)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail(collection, "update", e)
        return len(rows)

    def delete(self, collection: str, **predicate) -> int:
        if not predicate:
            raise ValueError("delete requires a predicate")
        try:
            rows = list(self.session.execute(self._query(collection, predicate)).scalars())
            for row in rows:
                self.session.delete(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail(collection, "delete", e)
        return len(rows)
