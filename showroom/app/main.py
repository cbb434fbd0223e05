from fastapi import FastAPI

from showroom.app.api.v1.router import router as v1_router
from showroom.app.core.logging import configure_logging
from showroom.app.core.settings import CART_SESSION_MAX, CART_SESSION_TTL_SECONDS
from showroom.services.cart import SessionStore

configure_logging()

app = FastAPI(title="SHOWROOM MAYOREO", version="0.1.0")
app.state.session_store = SessionStore(ttl_seconds=CART_SESSION_TTL_SECONDS, max_sessions=CART_SESSION_MAX)
app.include_router(v1_router, prefix="/v1")
