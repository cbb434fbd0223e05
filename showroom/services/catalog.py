"""
Catalog service.

Lecture seule : produit + variants + images + prix résolu.

Règle prix :
    prix = prix de la liste de prix (si la liste contient le produit)
           sinon prix de base du produit
    un seul prix par produit (pas de prix par variant)

Choix de la liste (toujours côté serveur) :
    staff de la société : liste explicite, ou liste du client
    sinon               : liste par défaut de la société
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from showroom.app.db.models.models_v1 import Customer, PriceList, PriceListItem, Product
from showroom.app.schemas.product import ImageRead, ProductRead, VariantRead
from showroom.services.errors import CustomerNotFound, InvalidPriceList, ProductNotFound, StaffOnly
from showroom.services.navigation import Principal, is_staff


def _company_price_list(db: Session, price_list_id: int, company_id: str) -> PriceList:
    pl = db.get(PriceList, price_list_id)
    if pl is None or pl.company_id != company_id:
        raise InvalidPriceList(price_list_id)
    return pl


def resolve_price(db: Session, product: Product, price_list_id: int | None) -> Decimal:
    if price_list_id is not None:
        # a list only ever prices its own company's products
        _company_price_list(db, price_list_id, product.company_id)
        item = db.get(PriceListItem, (price_list_id, product.id))
        if item is not None:
            return Decimal(item.price)
    return Decimal(product.price)


def default_price_list(db: Session, company_id: str) -> int | None:
    return db.scalar(
        select(PriceList.id)
        .where(PriceList.company_id == company_id)
        .where(PriceList.is_default.is_(True))
        .order_by(PriceList.id)
        .limit(1)
    )


def price_list_for_customer(db: Session, customer_id: int | None, company_id: str | None = None) -> int | None:
    if customer_id is None:
        return None
    customer = db.get(Customer, customer_id)
    if customer is None or (company_id is not None and customer.company_id != company_id):
        raise CustomerNotFound(customer_id)
    return customer.price_list_id


def effective_price_list(
    db: Session,
    company_id: str,
    *,
    principal: Principal | None = None,
    price_list_id: int | None = None,
    customer_id: int | None = None,
) -> int | None:
    """
    Price list applied to a company's products for this caller.

    Only staff of that company may pick a list, directly or through a
    customer; everyone else gets the company default.
    """
    staff = is_staff(principal, company_id)

    if price_list_id is not None:
        if not staff:
            raise StaffOnly("price_list_id")
        return _company_price_list(db, price_list_id, company_id).id

    if customer_id is not None:
        if not staff:
            raise StaffOnly("customer_id")
        customer_list = price_list_for_customer(db, customer_id, company_id)
        if customer_list is not None:
            return customer_list

    return default_price_list(db, company_id)


def to_read_model(db: Session, product: Product, price_list_id: int | None = None) -> ProductRead:
    return ProductRead(
        id=product.id,
        company_id=product.company_id,
        name=product.name,
        sku=product.sku,
        description=product.description,
        category=product.category,
        price=resolve_price(db, product, price_list_id),
        variants=[VariantRead.model_validate(v) for v in product.variants],
        images=[ImageRead.model_validate(i) for i in product.images],
    )


def _load_product(db: Session, product_id: int) -> Product:
    product = db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.variants), selectinload(Product.images))
    ).scalar_one_or_none()
    if product is None:
        raise ProductNotFound(product_id)
    return product


def fetch_product(
    db: Session,
    product_id: int,
    *,
    price_list_id: int | None = None,
) -> ProductRead:
    return to_read_model(db, _load_product(db, product_id), price_list_id)


def fetch_priced_product(
    db: Session,
    product_id: int,
    *,
    principal: Principal | None = None,
    price_list_id: int | None = None,
    customer_id: int | None = None,
) -> ProductRead:
    """fetch_product with the price list chosen for the caller."""
    product = _load_product(db, product_id)
    list_id = effective_price_list(
        db,
        product.company_id,
        principal=principal,
        price_list_id=price_list_id,
        customer_id=customer_id,
    )
    return to_read_model(db, product, list_id)


def fetch_catalog(
    db: Session,
    company_id: str,
    *,
    price_list_id: int | None = None,
    include_inactive: bool = False,
) -> list[ProductRead]:
    stmt = (
        select(Product)
        .where(Product.company_id == company_id)
        .options(selectinload(Product.variants), selectinload(Product.images))
        .order_by(Product.name, Product.id)
    )
    if not include_inactive:
        stmt = stmt.where(Product.active.is_(True))

    rows = db.execute(stmt).scalars().all()
    return [to_read_model(db, p, price_list_id) for p in rows]
