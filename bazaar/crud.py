import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from . import models, schemas
from .auth import Identity, create_access_token, hash_password, verify_password
from .errors import DuplicateEmail, Forbidden, InvalidCredentials, UserNotFound

logger = logging.getLogger(__name__)

# Business rule: amounts stored rounded to 2 decimals

def round_amount(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# ---- credential store / registration / login ----

def create_user(db: Session, user: schemas.UserCreate) -> models.User:
    db_user = models.User(
        name=user.name,
        email=user.email,
        password_hash=hash_password(user.password),
        role=user.role,
    )
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError as e:
        # the unique index on email decides concurrent registrations
        db.rollback()
        raise DuplicateEmail() from e
    db.refresh(db_user)
    logger.info("registered user %s with role %s", db_user.id, db_user.role)
    return db_user


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.execute(select(models.User).where(models.User.email == email)).scalar_one_or_none()


def authenticate(db: Session, email: str, password: str) -> Tuple[str, models.User]:
    """Check credentials and issue a token for the matching user."""
    user = get_user_by_email(db, email)
    if not user:
        logger.info("login failed: unknown email")
        raise UserNotFound()
    if not verify_password(password, user.password_hash):
        logger.info("login failed for user %s: bad password", user.id)
        raise InvalidCredentials()
    token = create_access_token(user.id, user.role)
    logger.info("user %s logged in", user.id)
    return token, user


# ---- catalog ----

def create_product(db: Session, identity: Identity, product: schemas.ProductCreate) -> models.Product:
    if identity.role != models.ROLE_SELLER:
        raise Forbidden("Only sellers can add products")
    db_product = models.Product(
        title=product.title,
        price=round_amount(product.price),
        description=product.description,
        image_url=product.image_url,
        seller_id=identity.id,
        stock=product.stock,
        category=product.category,
    )
    db.add(db_product)
    db.commit()
    db.refresh(db_product)
    logger.info("seller %s created product %s", identity.id, db_product.id)
    return db_product


def list_products(db: Session) -> List[models.Product]:
    return list(db.execute(select(models.Product).order_by(models.Product.id)).scalars())


# ---- orders ----

def place_order(db: Session, identity: Identity, order: schemas.OrderCreate) -> models.Order:
    # The total is the client's figure; products, stock and prices are not checked.
    db_order = models.Order(
        user_id=identity.id,
        total_amount=round_amount(order.total_amount),
        address=order.address,
    )
    db_order.items = [
        models.OrderItem(position=i, product_id=item.product_id, quantity=item.quantity)
        for i, item in enumerate(order.items)
    ]
    db.add(db_order)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # token for a user that no longer exists
        raise UserNotFound() from e
    db.refresh(db_order)
    logger.info("user %s placed order %s with %d item(s)", identity.id, db_order.id, len(db_order.items))
    return db_order


def list_orders_for_user(db: Session, user_id: int) -> List[models.Order]:
    stmt = (
        select(models.Order)
        .where(models.Order.user_id == user_id)
        .options(selectinload(models.Order.items).selectinload(models.OrderItem.product))
        .order_by(models.Order.id)
    )
    return list(db.execute(stmt).scalars())
