"""Persistence helpers shared by the resource routes.

Create/read/update/delete by numeric id, plus the member lookup by email
used for self-scoped access.
"""

import logging
from typing import Any, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from gym_backend.core.errors import ConcurrencyConflict, NotFound
from gym_backend.models.member import Member
from gym_backend.models.membership_type import MembershipType
from gym_backend.models.trainer import Trainer

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

NOT_FOUND_MESSAGES = {
    Member: "Member not found.",
    Trainer: "Trainer not found.",
    MembershipType: "Membership type not found.",
}


def _not_found(model: type) -> NotFound:
    return NotFound(NOT_FOUND_MESSAGES.get(model, "Record not found."))


def list_all(db: Session, model: type[ModelT]) -> list[ModelT]:
    return list(db.scalars(select(model).order_by(model.id)).unique())


def get_by_id(db: Session, model: type[ModelT], record_id: int) -> ModelT:
    record = db.get(model, record_id)
    if record is None:
        raise _not_found(model)
    return record


def exists(db: Session, model: type, record_id: int) -> bool:
    return db.scalar(select(func.count()).select_from(model).where(model.id == record_id)) > 0


def count(db: Session, model: type) -> int:
    return db.scalar(select(func.count()).select_from(model))


def create(db: Session, record: ModelT) -> ModelT:
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def update(db: Session, model: type[ModelT], record_id: int, values: dict[str, Any]) -> ModelT:
    """Apply ``values`` to the row and commit.

    If the row disappears between the read and the write the update is
    reported as not found. Any other lost update is a ConcurrencyConflict.
    """
    record = get_by_id(db, model, record_id)
    for field, value in values.items():
        setattr(record, field, value)

    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        if not exists(db, model, record_id):
            raise _not_found(model) from exc
        logger.error("Concurrent update detected for %s id=%s", model.__name__, record_id)
        raise ConcurrencyConflict(f"{model.__name__} {record_id} was modified concurrently.") from exc

    db.refresh(record)
    return record


def delete(db: Session, model: type, record_id: int) -> None:
    record = get_by_id(db, model, record_id)
    db.delete(record)
    db.commit()


def find_member_by_email(db: Session, email: str) -> Member | None:
    # Exact match on the stored member email; members are not linked to users by key.
    return db.scalars(select(Member).where(Member.email == email).limit(1)).first()
