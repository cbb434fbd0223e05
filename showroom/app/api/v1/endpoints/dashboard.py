from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_db, require_route
from showroom.app.core.settings import LOW_STOCK_THRESHOLD
from showroom.services.dashboard import dashboard_stats, low_stock, top_products
from showroom.services.navigation import Principal

router = APIRouter(prefix="/dashboard")

gate = require_route("/admin/dashboard")


@router.get("/stats")
def get_stats(db: Session = Depends(get_db), principal: Principal = Depends(gate)):
    stats = dashboard_stats(db, principal.company_id, low_stock_threshold=LOW_STOCK_THRESHOLD)
    return asdict(stats)


@router.get("/top-products")
def get_top_products(
    days: int = Query(default=7, ge=1, le=365),
    limit: int = Query(default=5, ge=1, le=50),
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    return top_products(db, principal.company_id, days=days, limit=limit)


@router.get("/low-stock")
def get_low_stock(
    threshold: int = Query(default=LOW_STOCK_THRESHOLD, ge=0),
    db: Session = Depends(get_db),
    principal: Principal = Depends(gate),
):
    return low_stock(db, principal.company_id, threshold=threshold)
