from decimal import Decimal

import pytest

from bazaar import crud, models, schemas
from bazaar.auth import Identity, decode_access_token, verify_password
from bazaar.errors import DuplicateEmail, Forbidden, InvalidCredentials, UserNotFound


def make_user(db, email="alice@x.com", role="user", password="secret"):
    return crud.create_user(db, schemas.UserCreate(name="Alice", email=email, password=password, role=role))


def test_create_user_stores_hash_not_plaintext(db_session):
    user = make_user(db_session)
    assert user.id is not None
    assert user.role == "user"
    assert user.password_hash != "secret"
    assert verify_password("secret", user.password_hash)
    assert crud.get_user_by_email(db_session, "alice@x.com").id == user.id


def test_role_defaults_to_user_when_null(db_session):
    user = crud.create_user(db_session, schemas.UserCreate(name="N", email="n@x.com", password="pw", role=None))
    assert user.role == "user"


def test_duplicate_email_rejected(db_session):
    make_user(db_session)
    with pytest.raises(DuplicateEmail):
        make_user(db_session)
    # session is still usable after the rollback
    assert len(db_session.query(models.User).all()) == 1


def test_authenticate_issues_token_for_user(db_session):
    user = make_user(db_session, role="seller")
    token, found = crud.authenticate(db_session, "alice@x.com", "secret")
    assert found.id == user.id
    assert decode_access_token(token) == Identity(user.id, "seller")


def test_authenticate_failures(db_session):
    make_user(db_session)
    with pytest.raises(UserNotFound):
        crud.authenticate(db_session, "nobody@x.com", "secret")
    with pytest.raises(InvalidCredentials):
        crud.authenticate(db_session, "alice@x.com", "wrong")


def test_create_product_requires_seller(db_session):
    buyer = make_user(db_session)
    product = schemas.ProductCreate(title="Shawl", price=Decimal("10"), stock=3)
    with pytest.raises(Forbidden):
        crud.create_product(db_session, Identity(buyer.id, buyer.role), product)


def test_list_products_in_creation_order(db_session):
    seller = make_user(db_session, email="s@x.com", role="seller")
    ident = Identity(seller.id, seller.role)
    assert crud.list_products(db_session) == []
    p1 = crud.create_product(db_session, ident, schemas.ProductCreate(title="P1", price=Decimal("1.5")))
    p2 = crud.create_product(db_session, ident, schemas.ProductCreate(title="P2", price=Decimal("2")))
    assert [p.id for p in crud.list_products(db_session)] == [p1.id, p2.id]
    assert p1.seller_id == seller.id


def test_place_order_defaults(db_session):
    user = make_user(db_session)
    order = crud.place_order(
        db_session,
        Identity(user.id, user.role),
        schemas.OrderCreate(
            items=[{"productId": 5, "quantity": 2}, {"productId": 3, "quantity": 1}],
            totalAmount=Decimal("40"),
            address="X",
        ),
    )
    assert order.user_id == user.id
    assert order.status == "Pending"
    assert order.created_at is not None
    assert order.total_amount == Decimal("40.00")
    assert [(i.product_id, i.quantity) for i in order.items] == [(5, 2), (3, 1)]


def test_place_order_for_deleted_user_fails(db_session):
    with pytest.raises(UserNotFound):
        crud.place_order(
            db_session,
            Identity(9999, "user"),
            schemas.OrderCreate(items=[{"productId": 1, "quantity": 1}], totalAmount=1, address="X"),
        )


def test_list_orders_for_user_expands_products(db_session):
    seller = make_user(db_session, email="s@x.com", role="seller")
    buyer = make_user(db_session, email="b@x.com")
    other = make_user(db_session, email="o@x.com")
    product = crud.create_product(
        db_session, Identity(seller.id, seller.role), schemas.ProductCreate(title="Lamp", price=Decimal("20"))
    )
    crud.place_order(
        db_session,
        Identity(buyer.id, buyer.role),
        schemas.OrderCreate(
            items=[{"productId": product.id, "quantity": 2}, {"productId": 4242, "quantity": 1}],
            totalAmount=40,
            address="X",
        ),
    )
    crud.place_order(
        db_session,
        Identity(other.id, other.role),
        schemas.OrderCreate(items=[{"productId": product.id, "quantity": 1}], totalAmount=20, address="Y"),
    )

    orders = crud.list_orders_for_user(db_session, buyer.id)
    assert len(orders) == 1
    first, missing = orders[0].items
    assert first.product.title == "Lamp"
    assert missing.product is None
