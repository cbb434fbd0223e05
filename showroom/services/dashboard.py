"""
Dashboard service.

Résumé du jour pour le back-office d'une société :
    ventes du jour (commandes non annulées)
    commandes en attente
    nouveaux leads du jour
    variants en stock bas
plus les modèles les plus vendus et la liste des variants à réapprovisionner.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from showroom.app.db.models.core_types import OrderStatus
from showroom.app.db.models.models_v1 import Lead, Order, OrderLine, Product, ProductVariant


@dataclass(frozen=True)
class DashboardStats:
    sales_today: Decimal
    pending_orders: int
    new_leads_today: int
    low_stock_count: int
    recent_leads: list[dict]


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _low_stock_filter(stmt, company_id: str, threshold: int):
    return (
        stmt.join(Product, Product.id == ProductVariant.product_id)
        .where(Product.company_id == company_id)
        .where(Product.active.is_(True))
        .where(ProductVariant.stock <= threshold)
    )


def dashboard_stats(
    db: Session,
    company_id: str,
    *,
    low_stock_threshold: int,
    now: datetime | None = None,
    recent_leads: int = 5,
) -> DashboardStats:
    since = _start_of_day(now or datetime.now(timezone.utc))

    sales = db.scalar(
        select(func.coalesce(func.sum(Order.total), 0))
        .where(Order.company_id == company_id)
        .where(Order.status != OrderStatus.cancelled)
        .where(Order.created_at >= since)
    )
    pending = db.scalar(
        select(func.count(Order.id))
        .where(Order.company_id == company_id)
        .where(Order.status == OrderStatus.pending)
    )
    leads_today = db.scalar(
        select(func.count(Lead.id))
        .where(Lead.company_id == company_id)
        .where(Lead.created_at >= since)
    )
    low_stock = db.scalar(
        _low_stock_filter(select(func.count(ProductVariant.id)), company_id, low_stock_threshold)
    )
    latest = db.execute(
        select(Lead)
        .where(Lead.company_id == company_id)
        .order_by(Lead.created_at.desc(), Lead.id.desc())
        .limit(recent_leads)
    ).scalars().all()

    return DashboardStats(
        sales_today=Decimal(str(sales)),
        pending_orders=pending or 0,
        new_leads_today=leads_today or 0,
        low_stock_count=low_stock or 0,
        recent_leads=[
            {"id": ld.id, "name": ld.name, "phone": ld.phone, "created_at": ld.created_at}
            for ld in latest
        ],
    )


def top_products(
    db: Session,
    company_id: str,
    *,
    days: int = 7,
    limit: int = 5,
    now: datetime | None = None,
) -> list[dict]:
    """Pairs sold per product over the last `days` days, cancelled orders excluded."""
    since = (now or datetime.now(timezone.utc)) - timedelta(days=days)

    pairs = func.sum(OrderLine.quantity).label("pairs")
    revenue = func.sum(OrderLine.subtotal).label("revenue")
    rows = db.execute(
        select(OrderLine.product_id, Product.name, Product.sku, pairs, revenue)
        .join(Order, Order.id == OrderLine.order_id)
        .join(Product, Product.id == OrderLine.product_id)
        .where(Order.company_id == company_id)
        .where(Order.status != OrderStatus.cancelled)
        .where(Order.created_at >= since)
        .group_by(OrderLine.product_id, Product.name, Product.sku)
        .order_by(pairs.desc(), OrderLine.product_id)
        .limit(limit)
    ).all()

    return [
        {
            "product_id": product_id,
            "name": name,
            "sku": sku,
            "pairs": int(p),
            "revenue": Decimal(str(r)),
        }
        for product_id, name, sku, p, r in rows
    ]


def low_stock(db: Session, company_id: str, *, threshold: int, limit: int = 50) -> list[dict]:
    rows = db.execute(
        _low_stock_filter(
            select(ProductVariant.id, Product.id, Product.name, Product.sku,
                   ProductVariant.size, ProductVariant.color, ProductVariant.stock),
            company_id,
            threshold,
        )
        .order_by(ProductVariant.stock, Product.name, ProductVariant.color, ProductVariant.size)
        .limit(limit)
    ).all()

    return [
        {
            "variant_id": variant_id,
            "product_id": product_id,
            "name": name,
            "sku": sku,
            "size": size,
            "color": color,
            "stock": stock,
        }
        for variant_id, product_id, name, sku, size, color, stock in rows
    ]
