from fastapi import APIRouter

from showroom.app.api.v1.endpoints.health import router as health_router
from showroom.app.api.v1.endpoints.catalog import router as catalog_router
from showroom.app.api.v1.endpoints.selection import router as selection_router
from showroom.app.api.v1.endpoints.cart import router as cart_router
from showroom.app.api.v1.endpoints.checkout import router as checkout_router
from showroom.app.api.v1.endpoints.products import router as products_router
from showroom.app.api.v1.endpoints.orders import router as orders_router
from showroom.app.api.v1.endpoints.customers import router as customers_router
from showroom.app.api.v1.endpoints.price_lists import router as price_lists_router
from showroom.app.api.v1.endpoints.navigation import router as navigation_router
from showroom.app.api.v1.endpoints.dashboard import router as dashboard_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(catalog_router, tags=["catalog"])
router.include_router(selection_router, tags=["selection"])
router.include_router(cart_router, tags=["cart"])
router.include_router(checkout_router, tags=["checkout"])
router.include_router(products_router, tags=["products"])
router.include_router(orders_router, tags=["orders"])
router.include_router(customers_router, tags=["customers"])
router.include_router(price_lists_router, tags=["price_lists"])
router.include_router(navigation_router, tags=["navigation"])
router.include_router(dashboard_router, tags=["dashboard"])
