import os

# must be set before showroom.app.db.session builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from showroom.app.core.settings import JWT_ALGORITHM, JWT_SECRET
from showroom.app.db.session import SessionLocal, engine
from showroom.app.db.models.models_v1 import Base, Company, Product, ProductImage, ProductVariant
from showroom.app.main import app
from showroom.app.schemas.product import ImageRead, ProductRead, VariantRead
from showroom.services.cart import SessionStore


@pytest.fixture(scope="function")
def db_session() -> Session:
    """
    Session DB isolée par test.

    Schéma créé avant le test, supprimé après : rien ne fuit d'un test à l'autre.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def company(db_session) -> Company:
    c = Company(id="default", name="Showroom León", active=True)
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def bota(db_session, company) -> Product:
    """Bota Clásica: (25, Negro, 3), (26, Negro, 0), price 500."""
    p = Product(
        company_id=company.id,
        sku="BOTA-CLA-001",
        name="Bota Clásica",
        price=Decimal("500"),
        variants=[
            ProductVariant(size="25", color="Negro", stock=3),
            ProductVariant(size="26", color="Negro", stock=0),
        ],
        images=[ProductImage(url="https://cdn.example.com/bota.jpg", is_primary=True)],
    )
    db_session.add(p)
    db_session.commit()
    db_session.refresh(p)
    return p


@pytest.fixture
def bota_read() -> ProductRead:
    """Same product as `bota`, without a database."""
    return ProductRead(
        id=1,
        company_id="default",
        name="Bota Clásica",
        sku="BOTA-CLA-001",
        price=Decimal("500"),
        variants=[
            VariantRead(id=10, size="25", color="Negro", stock=3),
            VariantRead(id=11, size="26", color="Negro", stock=0),
        ],
        images=[ImageRead(id=1, url="https://cdn.example.com/bota.jpg", is_primary=True)],
    )


@pytest.fixture
def client(db_session):
    app.state.session_store = SessionStore()
    with TestClient(app) as c:
        yield c


def make_token(role: str, *, user_id: str = "u-1", company_id: str = "default", expires_in: int = 3600) -> str:
    claims = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "role": role,
        "companyId": company_id,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def token_for():
    return make_token
