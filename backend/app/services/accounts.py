from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BadRequest, MISSING_FIELDS_MESSAGE
from app.core.security import get_password_hash
from app.core.timeutils import ensure_utc
from app.models.pickup import Pickup
from app.schemas.account import AccountCreate, AccountListItem, AccountOut, PickupCount


def clean_text(value: Optional[str]) -> str:
    return str(value or "").strip()


def build_account_out(account) -> AccountOut:
    return AccountOut(
        id=account.id,
        code=account.code,
        name=account.name,
        is_active=bool(account.is_active),
        created_at=ensure_utc(account.created_at),
        updated_at=ensure_utc(account.updated_at),
    )


def build_account_list_item(account, pickups: int) -> AccountListItem:
    return AccountListItem(
        **build_account_out(account).model_dump(),
        count=PickupCount(pickups=int(pickups or 0)),
    )


def pickup_foreign_key(model):
    return Pickup.hospital_id if model.__tablename__ == "hospitals" else Pickup.driver_id


def list_with_pickup_counts(db: Session, model) -> list[AccountListItem]:
    foreign_key = pickup_foreign_key(model)
    rows = (
        db.query(model, func.count(Pickup.id))
        .outerjoin(Pickup, foreign_key == model.id)
        .group_by(model.id)
        .order_by(model.created_at.desc(), model.id.desc())
        .all()
    )
    return [build_account_list_item(account, count) for account, count in rows]


def count_pickups(db: Session, model, account_id: str) -> int:
    return db.query(Pickup).filter(pickup_foreign_key(model) == account_id).count()


def create_account(db: Session, model, payload: AccountCreate, duplicate_detail: str):
    """Insert a hospital or driver; ``code`` must be unused and the password is hashed."""
    code = clean_text(payload.code)
    name = clean_text(payload.name)
    if not code or not name or not payload.password:
        raise BadRequest(MISSING_FIELDS_MESSAGE)

    if db.query(model).filter(model.code == code).first():
        raise BadRequest(duplicate_detail)

    account = model(
        code=code,
        name=name,
        password_hash=get_password_hash(payload.password),
        is_active=payload.is_active if payload.is_active is not None else True,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise BadRequest(duplicate_detail) from exc
    db.refresh(account)
    return account


def delete_account(db: Session, model, account, blocked_template: str) -> None:
    pickups = count_pickups(db, model, account.id)
    if pickups > 0:
        raise BadRequest(blocked_template.format(count=pickups))
    db.delete(account)
    db.commit()
