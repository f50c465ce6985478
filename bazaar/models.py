from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import foreign, relationship
from .db import Base

ROLE_USER = "user"
ROLE_SELLER = "seller"
ROLES = (ROLE_USER, ROLE_SELLER)

STATUS_PENDING = "Pending"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # login key; uniqueness is enforced here so concurrent registrations race at the DB
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_USER, index=True)

    products = relationship("Product", back_populates="seller")
    orders = relationship("Order", back_populates="user", order_by="Order.id")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=True, index=True)

    seller = relationship("User", back_populates="products")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    address = Column(String, nullable=False)
    status = Column(String, nullable=False, default=STATUS_PENDING)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    # Not a foreign key: orders may reference products that are missing
    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship(
        "Product",
        primaryjoin=lambda: foreign(OrderItem.product_id) == Product.id,
        viewonly=True,
        uselist=False,
    )
