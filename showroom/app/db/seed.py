from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select

from showroom.app.core.logging import configure_logging
from showroom.app.core.settings import DEFAULT_COMPANY_ID
from showroom.app.db.session import SessionLocal
from showroom.app.db.models.models_v1 import (
    Company,
    PriceList,
    Product,
    ProductImage,
    ProductVariant,
)

logger = logging.getLogger(__name__)


def run_seed():
    db = SessionLocal()
    try:
        # 1) Company "default"
        company = db.get(Company, DEFAULT_COMPANY_ID)
        if not company:
            company = Company(id=DEFAULT_COMPANY_ID, name="Showroom León", active=True)
            db.add(company)
            db.commit()

        # 2) Default price list (empty: product base prices apply)
        pl = db.scalar(
            select(PriceList)
            .where(PriceList.company_id == company.id)
            .where(PriceList.name == "Mayoreo")
        )
        if not pl:
            db.add(PriceList(company_id=company.id, name="Mayoreo", currency="MXN", is_default=True))
            db.commit()

        # 3) Demo product
        product = db.scalar(
            select(Product)
            .where(Product.company_id == company.id)
            .where(Product.sku == "BOTA-CLA-001")
        )
        if not product:
            product = Product(
                company_id=company.id,
                sku="BOTA-CLA-001",
                name="Bota Clásica",
                description="Bota de piel para dama",
                category="Botas",
                price=Decimal("500"),
                variants=[
                    ProductVariant(size="25", color="Negro", stock=3),
                    ProductVariant(size="26", color="Negro", stock=0),
                    ProductVariant(size="25", color="Café", stock=12),
                ],
                images=[ProductImage(url="https://cdn.example.com/bota-clasica.jpg", is_primary=True)],
            )
            db.add(product)
            db.commit()

        logger.info("SEED OK: company=%s, product=%s", company.id, product.sku)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    run_seed()
