"""Member accounts: provisioning from a paid order, and credential checks."""
import calendar
import logging
from datetime import datetime, timezone
from uuid import uuid4

from passlib.hash import pbkdf2_sha512
from sqlalchemy.exc import IntegrityError

from buildup.errors import (
    InvalidCredentials,
    MembershipInactive,
    NoValidPayment,
    UserExists,
    UserNotFound,
    ValidationError,
)
from buildup.models import Order, OrderStatus, User
from buildup.payments import normalize_email
from buildup.pricing import price_for

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return pbkdf2_sha512.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pbkdf2_sha512.verify(password, password_hash)


def add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def provision_user(db, email, password, plan, profile=None):
    """Create the member account paid for by a successful order.

    The order is claimed with a conditional update inside the same
    transaction as the user insert, so one order yields at most one user.
    """
    plan, _ = price_for(plan)
    email = normalize_email(email)
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if db.query(User).filter_by(email=email).first():
        logger.warning("Provisioning rejected, user %s already exists", email)
        raise UserExists()

    order = (
        db.query(Order)
        .filter_by(email=email, plan=plan.value, status=OrderStatus.SUCCESS.value, user_id=None)
        .order_by(Order.created_at)
        .first()
    )
    if order is None:
        logger.warning("No valid payment found for %s (%s)", email, plan.value)
        raise NoValidPayment()

    start = datetime.now(timezone.utc)
    user = User(
        id=uuid4().hex,
        email=email,
        password_hash=hash_password(password),
        name=order.name,
        phone=order.phone,
        membership_plan=plan.value,
        membership_start=start,
        membership_end=add_months(start, 1),
        membership_active=True,
        profile=profile or {},
    )

    try:
        db.add(user)
        db.flush()
    except IntegrityError:
        db.rollback()
        raise UserExists() from None

    claimed = (
        db.query(Order)
        .filter(
            Order.id == order.id,
            Order.status == OrderStatus.SUCCESS.value,
            Order.user_id.is_(None),
        )
        .update({"user_id": user.id}, synchronize_session=False)
    )
    if claimed != 1:
        db.rollback()
        logger.warning("Order %s was claimed concurrently", order.provider_order_id)
        raise NoValidPayment()

    db.commit()
    db.refresh(user)
    logger.info("Provisioned %s membership for %s from order %s", plan.value, email, order.provider_order_id)
    return user


def authenticate_user(db, email, password):
    user = db.query(User).filter_by(email=normalize_email(email or "")).first()
    if user is None or not verify_password(password or "", user.password_hash):
        raise InvalidCredentials()
    if not user.membership_active:
        raise MembershipInactive()
    return user


def get_active_user(db, user_id):
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    if not user.membership_active:
        raise MembershipInactive()
    return user
