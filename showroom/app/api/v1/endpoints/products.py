from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_db, require_route
from showroom.app.db.models.models_v1 import Product, ProductImage, ProductVariant
from showroom.app.schemas.product import ProductRead
from showroom.services.catalog import fetch_catalog, fetch_product
from showroom.services.navigation import Principal

router = APIRouter(prefix="/products")


class VariantCreate(BaseModel):
    size: str = Field(min_length=1, max_length=32)
    color: str = Field(min_length=1, max_length=64)
    stock: int = Field(default=0, ge=0)


class ImageCreate(BaseModel):
    url: str = Field(min_length=1, max_length=1024)
    is_primary: bool = False


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=100)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    active: bool = True
    variants: list[VariantCreate] = Field(default_factory=list)
    images: list[ImageCreate] = Field(default_factory=list)


class StockUpdate(BaseModel):
    variant_id: int
    stock: int = Field(ge=0)


@router.get("", response_model=list[ProductRead])
def list_products(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/products")),
):
    return fetch_catalog(db, principal.company_id, include_inactive=True)


@router.post("")
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/products/new")),
):
    exists = db.execute(
        select(Product)
        .where(Product.company_id == principal.company_id)
        .where(Product.sku == payload.sku)
    ).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="SKU already exists")

    combos = [(v.size, v.color) for v in payload.variants]
    if len(combos) != len(set(combos)):
        raise HTTPException(status_code=400, detail="Duplicate size/color variant")

    p = Product(
        company_id=principal.company_id,
        sku=payload.sku,
        name=payload.name,
        description=payload.description,
        category=payload.category,
        price=payload.price,
        active=payload.active,
        variants=[ProductVariant(size=v.size, color=v.color, stock=v.stock) for v in payload.variants],
        images=[
            ProductImage(url=img.url, is_primary=img.is_primary, position=pos)
            for pos, img in enumerate(payload.images)
        ],
    )
    db.add(p)
    db.commit()
    db.refresh(p)

    return {"id": p.id, "sku": p.sku, "name": p.name}


@router.post("/stock")
def update_stock(
    payload: StockUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/products")),
):
    variant = db.get(ProductVariant, payload.variant_id)
    if not variant or variant.product.company_id != principal.company_id:
        raise HTTPException(status_code=404, detail="Variant not found")

    variant.stock = payload.stock
    db.commit()
    return {"variant_id": variant.id, "stock": variant.stock}


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_route("/admin/products")),
):
    product = db.get(Product, product_id)
    if not product or product.company_id != principal.company_id:
        raise HTTPException(status_code=404, detail="Product not found")
    return fetch_product(db, product_id)
