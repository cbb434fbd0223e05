from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from showroom.app.api.v1.endpoints import checkout as checkout_endpoint
from showroom.app.db.models.models_v1 import (
    Company,
    Customer,
    Order,
    PriceList,
    PriceListItem,
    Product,
    ProductVariant,
)
from showroom.app.main import app

CART = {"X-Cart-Session": "s-1"}


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _amount(value) -> Decimal:
    # Decimal fields come back as strings (pydantic) or numbers (plain dicts)
    return Decimal(str(value))


def _add_bota_to_cart(client, product_id: int, qty: int = 3, headers: dict | None = None, params: dict | None = None):
    headers = {**CART, **(headers or {})}
    r = client.put(
        f"/v1/selection/{product_id}",
        json={"color": "Negro", "size": "25", "quantity": qty},
        headers=headers,
        params=params,
    )
    assert r.status_code == 200, r.text
    r = client.post(f"/v1/selection/{product_id}/commit", headers=headers, params=params)
    assert r.status_code == 200, r.text
    return r.json()


def _other_company_list(db_session, product_id: int) -> PriceList:
    """A second company whose list prices the Bota at $1."""
    db_session.add(Company(id="other", name="Otra Zapatería", active=True))
    pl = PriceList(company_id="other", name="Regalo")
    db_session.add(pl)
    db_session.flush()
    db_session.add(PriceListItem(price_list_id=pl.id, product_id=product_id, price=Decimal("1")))
    db_session.commit()
    return pl


# ---------- PUBLIC ----------
def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_matrix_and_public_catalog(client, bota):
    r = client.get(f"/v1/catalog/products/{bota.id}/matrix")
    assert r.status_code == 200
    body = r.json()
    assert body["sizes"] == ["25", "26"]
    assert body["colors"] == ["Negro"]
    cells = body["rows"][0]["cells"]
    assert cells[0]["orderable"] is True
    assert cells[1]["orderable"] is False

    r = client.get("/v1/catalog/default")
    assert [p["sku"] for p in r.json()] == ["BOTA-CLA-001"]

    assert client.get("/v1/catalog/products/999").status_code == 404


def test_price_list_price_replaces_base_price(client, db_session, bota, token_for):
    pl = PriceList(company_id="default", name="Mayoreo")
    db_session.add(pl)
    db_session.flush()
    db_session.add(PriceListItem(price_list_id=pl.id, product_id=bota.id, price=Decimal("450")))
    db_session.commit()
    seller = _auth(token_for("SELLER"))

    r = client.get(f"/v1/catalog/products/{bota.id}", params={"price_list_id": pl.id}, headers=seller)
    assert _amount(r.json()["price"]) == Decimal("450")

    r = client.get(f"/v1/catalog/products/{bota.id}")
    assert _amount(r.json()["price"]) == Decimal("500")

    # only staff pick a list
    r = client.get(f"/v1/catalog/products/{bota.id}", params={"price_list_id": pl.id})
    assert r.status_code == 403
    r = client.get(
        f"/v1/catalog/products/{bota.id}",
        params={"price_list_id": pl.id},
        headers=_auth(token_for("BUYER")),
    )
    assert r.status_code == 403


def test_default_price_list_applies_to_everyone(client, db_session, bota):
    pl = PriceList(company_id="default", name="Público", is_default=True)
    db_session.add(pl)
    db_session.flush()
    db_session.add(PriceListItem(price_list_id=pl.id, product_id=bota.id, price=Decimal("520")))
    db_session.commit()

    r = client.get(f"/v1/catalog/products/{bota.id}")
    assert _amount(r.json()["price"]) == Decimal("520")

    r = client.get("/v1/catalog/default")
    assert _amount(r.json()[0]["price"]) == Decimal("520")


def test_foreign_price_list_is_rejected(client, db_session, bota, token_for):
    pl = _other_company_list(db_session, bota.id)
    seller = _auth(token_for("SELLER"))

    params = {"price_list_id": pl.id}
    assert client.get(f"/v1/catalog/products/{bota.id}", params=params).status_code == 403
    assert client.get(f"/v1/catalog/products/{bota.id}", params=params, headers=seller).status_code == 404
    assert client.get("/v1/catalog/default", params=params, headers=seller).status_code == 404

    # staff of the other company cannot price this company's products either
    other_seller = _auth(token_for("SELLER", company_id="other"))
    r = client.get(f"/v1/catalog/products/{bota.id}", params=params, headers=other_seller)
    assert r.status_code == 403

    body = {"color": "Negro", "size": "25", "quantity": 3}
    r = client.put(f"/v1/selection/{bota.id}", json=body, headers=CART, params=params)
    assert r.status_code == 403
    r = client.put(f"/v1/selection/{bota.id}", json=body, headers={**CART, **seller}, params=params)
    assert r.status_code == 404

    _add_bota_to_cart(client, bota.id)
    client.post("/v1/checkout", json={"name": "Ana", "phone": "477"}, headers=CART)
    assert db_session.scalars(select(Order)).one().total == Decimal("1500")


def test_customer_price_list_is_staff_only(client, db_session, bota, token_for):
    pl = PriceList(company_id="default", name="Mayoreo")
    db_session.add(pl)
    db_session.flush()
    db_session.add(PriceListItem(price_list_id=pl.id, product_id=bota.id, price=Decimal("450")))
    customer = Customer(company_id="default", business_name="Zapatería Lupita", price_list_id=pl.id)
    db_session.add(customer)
    db_session.commit()

    params = {"customer_id": customer.id}
    assert client.get(f"/v1/catalog/products/{bota.id}", params=params).status_code == 403

    r = client.get(f"/v1/catalog/products/{bota.id}", params=params, headers=_auth(token_for("SELLER")))
    assert _amount(r.json()["price"]) == Decimal("450")

    r = client.get(
        f"/v1/catalog/products/{bota.id}",
        params={"customer_id": 999},
        headers=_auth(token_for("SELLER")),
    )
    assert r.status_code == 404


# ---------- SELECTION / CART ----------
def test_cart_session_header_is_required(client, bota):
    assert client.get("/v1/cart").status_code == 400
    assert client.get("/v1/cart", headers={"X-Cart-Session": "  "}).status_code == 400


def test_selection_rejects_quantity_above_stock(client, bota):
    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 4},
        headers=CART,
    )
    assert r.status_code == 409
    assert r.json()["detail"]["available"] == 3

    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Rojo", "size": "25", "quantity": 1},
        headers=CART,
    )
    assert r.status_code == 404

    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": -1},
        headers=CART,
    )
    assert r.status_code == 422


def test_selection_commit_fills_the_cart(client, bota):
    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 3},
        headers=CART,
    )
    assert r.status_code == 200
    assert r.json()["pending"] == {"Negro|25": 3}
    assert _amount(r.json()["total_price"]) == Decimal("1500")

    r = client.post(f"/v1/selection/{bota.id}/commit", headers=CART)
    assert r.status_code == 200
    cart = r.json()
    assert len(cart["lines"]) == 1
    assert cart["lines"][0]["quantity"] == 3
    assert _amount(cart["total"]) == Decimal("1500")
    assert cart["item_count"] == 3

    # grid is consumed by the commit
    r = client.get(f"/v1/selection/{bota.id}", headers=CART)
    assert r.json()["pending"] == {}

    # other sessions do not see this cart
    r = client.get("/v1/cart", headers={"X-Cart-Session": "s-2"})
    assert r.json()["lines"] == []


def test_commit_without_selection(client, bota):
    assert client.post(f"/v1/selection/{bota.id}/commit", headers=CART).status_code == 400


def test_commit_at_a_different_price_leaves_cart_untouched(client, db_session, bota, token_for):
    _add_bota_to_cart(client, bota.id, qty=2)

    pl = PriceList(company_id="default", name="Promo")
    db_session.add(pl)
    db_session.flush()
    db_session.add(PriceListItem(price_list_id=pl.id, product_id=bota.id, price=Decimal("450")))
    db_session.commit()

    seller = {**CART, **_auth(token_for("SELLER"))}
    params = {"price_list_id": pl.id}
    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 1},
        headers=seller,
        params=params,
    )
    assert r.status_code == 200
    r = client.post(f"/v1/selection/{bota.id}/commit", headers=seller, params=params)
    assert r.status_code == 409

    cart = client.get("/v1/cart", headers=CART).json()
    assert cart["lines"][0]["quantity"] == 2
    assert _amount(cart["total"]) == Decimal("1000")


def _set_stock(db_session, product_id: int, size: str, stock: int) -> None:
    variant = db_session.scalars(
        select(ProductVariant).where(ProductVariant.product_id == product_id, ProductVariant.size == size)
    ).one()
    variant.stock = stock
    db_session.commit()


def test_commit_sees_stock_lowered_after_selection(client, db_session, bota):
    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 3},
        headers=CART,
    )
    assert r.status_code == 200

    _set_stock(db_session, bota.id, "25", 1)

    r = client.post(f"/v1/selection/{bota.id}/commit", headers=CART)
    assert r.status_code == 400
    assert client.get("/v1/cart", headers=CART).json()["lines"] == []

    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 2},
        headers=CART,
    )
    assert r.status_code == 409
    assert r.json()["detail"]["available"] == 1


def test_selection_picks_up_price_change(client, db_session, bota):
    r = client.put(
        f"/v1/selection/{bota.id}",
        json={"color": "Negro", "size": "25", "quantity": 2},
        headers=CART,
    )
    assert _amount(r.json()["total_price"]) == Decimal("1000")

    db_session.get(Product, bota.id).price = Decimal("450")
    db_session.commit()

    r = client.get(f"/v1/selection/{bota.id}", headers=CART)
    assert r.json()["pending"] == {"Negro|25": 2}
    assert _amount(r.json()["total_price"]) == Decimal("900")

    cart = client.post(f"/v1/selection/{bota.id}/commit", headers=CART).json()
    assert _amount(cart["lines"][0]["unit_price"]) == Decimal("450")
    assert _amount(cart["total"]) == Decimal("900")


def test_reads_do_not_open_sessions(client, bota):
    store = app.state.session_store

    for i in range(20):
        headers = {"X-Cart-Session": f"reader-{i}"}
        assert client.get("/v1/cart", headers=headers).json()["lines"] == []
        assert client.get(f"/v1/selection/{bota.id}", headers=headers).status_code == 200
        assert client.delete("/v1/cart/lines/0", headers=headers).status_code == 404
        assert client.post(f"/v1/selection/{bota.id}/commit", headers=headers).status_code == 400

    assert len(store) == 0

    _add_bota_to_cart(client, bota.id)
    assert len(store) == 1


def test_remove_cart_line(client, bota):
    _add_bota_to_cart(client, bota.id)

    assert client.delete("/v1/cart/lines/5", headers=CART).status_code == 404

    r = client.delete("/v1/cart/lines/0", headers=CART)
    assert r.status_code == 200
    assert r.json()["lines"] == []
    assert _amount(r.json()["total"]) == Decimal("0")


# ---------- CHECKOUT ----------
def test_checkout_stores_order_and_clears_cart(client, db_session, bota):
    _add_bota_to_cart(client, bota.id)

    r = client.post("/v1/checkout", json={"name": "Ana", "phone": "4771234567"}, headers=CART)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["order_number"].startswith("PED-")
    assert "Cantidad: 3 pares | Sub: $1,500" in body["message"]
    assert body["whatsapp_url"].startswith("https://wa.me/5214770000000?text=")
    assert _amount(body["request"]["total"]) == Decimal("1500")

    assert client.get("/v1/cart", headers=CART).json()["lines"] == []

    order = db_session.scalars(select(Order)).one()
    assert order.total == Decimal("1500")
    assert [ln.quantity for ln in order.lines] == [3]


def test_checkout_errors(client, bota):
    r = client.post("/v1/checkout", json={"name": "Ana", "phone": "477"}, headers=CART)
    assert r.status_code == 400

    _add_bota_to_cart(client, bota.id)
    r = client.post("/v1/checkout", json={"name": "  ", "phone": "477"}, headers=CART)
    assert r.status_code == 422
    assert len(client.get("/v1/cart", headers=CART).json()["lines"]) == 1


def test_checkout_db_failure_keeps_cart(client, bota, monkeypatch):
    _add_bota_to_cart(client, bota.id)

    def broken(*args, **kwargs):
        raise OperationalError("INSERT INTO orders", {}, Exception("db down"))

    monkeypatch.setattr(checkout_endpoint, "create_order", broken)

    r = client.post("/v1/checkout", json={"name": "Ana", "phone": "477"}, headers=CART)
    assert r.status_code == 503
    assert r.json()["detail"] == "No se pudo procesar tu pedido, intenta de nuevo."

    cart = client.get("/v1/cart", headers=CART).json()
    assert len(cart["lines"]) == 1
    assert _amount(cart["total"]) == Decimal("1500")


def test_checkout_drops_the_session(client, bota):
    store = app.state.session_store
    _add_bota_to_cart(client, bota.id)
    assert len(store) == 1

    r = client.post("/v1/checkout", json={"name": "Ana", "phone": "477"}, headers=CART)
    assert r.status_code == 200
    assert len(store) == 0
    assert store.find("s-1") is None


def test_checkout_company_comes_from_the_cart(client, db_session, bota):
    db_session.add(Company(id="other", name="Otra Zapatería", active=True))
    db_session.commit()
    _add_bota_to_cart(client, bota.id)

    r = client.post(
        "/v1/checkout",
        json={"name": "Ana", "phone": "477", "company_id": "other"},
        headers=CART,
    )
    assert r.status_code == 200, r.text
    assert r.json()["request"]["company_id"] == "default"

    order = db_session.scalars(select(Order)).one()
    assert order.company_id == "default"
    assert order.lead.company_id == "default"


def test_checkout_customer_is_staff_only(client, db_session, bota, token_for):
    db_session.add(Company(id="other", name="Otra Zapatería", active=True))
    mine = Customer(company_id="default", business_name="Zapatería Lupita")
    foreign = Customer(company_id="other", business_name="Calzado Norte")
    db_session.add_all([mine, foreign])
    db_session.commit()
    _add_bota_to_cart(client, bota.id)

    seller = {**CART, **_auth(token_for("SELLER", user_id="s-1"))}
    payload = {"name": "Ana", "phone": "477", "customer_id": mine.id}

    r = client.post("/v1/checkout", json=payload, headers=CART)
    assert r.status_code == 403
    r = client.post("/v1/checkout", json=payload, headers={**CART, **_auth(token_for("BUYER"))})
    assert r.status_code == 403
    r = client.post(
        "/v1/checkout",
        json=payload,
        headers={**CART, **_auth(token_for("SELLER", company_id="other"))},
    )
    assert r.status_code == 403

    r = client.post("/v1/checkout", json={**payload, "customer_id": foreign.id}, headers=seller)
    assert r.status_code == 404
    r = client.post("/v1/checkout", json={**payload, "customer_id": 999}, headers=seller)
    assert r.status_code == 404

    # nothing stored, cart kept
    assert db_session.scalars(select(Order)).all() == []
    assert len(client.get("/v1/cart", headers=CART).json()["lines"]) == 1

    r = client.post("/v1/checkout", json=payload, headers=seller)
    assert r.status_code == 200, r.text
    order = db_session.scalars(select(Order)).one()
    assert order.customer_id == mine.id
    assert order.placed_by == "s-1"


def test_checkout_rejects_mixed_company_cart(client, db_session, bota):
    db_session.add(Company(id="other", name="Otra Zapatería", active=True))
    other = Product(
        company_id="other",
        sku="TEN-001",
        name="Tenis Urbano",
        price=Decimal("300"),
        variants=[ProductVariant(size="25", color="Negro", stock=5)],
    )
    db_session.add(other)
    db_session.commit()

    _add_bota_to_cart(client, bota.id)
    _add_bota_to_cart(client, other.id, qty=1)

    r = client.post("/v1/checkout", json={"name": "Ana", "phone": "477"}, headers=CART)
    assert r.status_code == 400
    assert "several companies" in r.json()["detail"]
    assert db_session.scalars(select(Order)).all() == []


# ---------- BACK-OFFICE GATE ----------
def test_backoffice_requires_credentials(client, bota, token_for):
    r = client.get("/v1/products")
    assert r.status_code == 401
    assert r.headers["location"] == "/login"

    r = client.get("/v1/products", headers=_auth(token_for("OWNER", expires_in=-60)))
    assert r.status_code == 401

    r = client.get("/v1/products", headers=_auth(token_for("BUYER")))
    assert r.status_code == 403
    assert r.headers["location"] == "/"

    r = client.get("/v1/products", headers=_auth(token_for("SELLER")))
    assert r.status_code == 403
    assert r.json()["detail"]["redirect_to"] == "/admin/orders"

    r = client.get("/v1/products", headers=_auth(token_for("SUPERVISOR")))
    assert r.status_code == 200
    assert [p["sku"] for p in r.json()] == ["BOTA-CLA-001"]


def test_create_product_and_update_stock(client, company, token_for):
    headers = _auth(token_for("ADMIN"))
    payload = {
        "sku": "BOT-002",
        "name": "Botín Casual",
        "price": "380",
        "variants": [{"size": "24", "color": "Miel", "stock": 5}],
    }

    r = client.post("/v1/products", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    product_id = r.json()["id"]

    assert client.post("/v1/products", json=payload, headers=headers).status_code == 409

    product = client.get(f"/v1/products/{product_id}", headers=headers).json()
    variant_id = product["variants"][0]["id"]

    r = client.post("/v1/products/stock", json={"variant_id": variant_id, "stock": 0}, headers=headers)
    assert r.json() == {"variant_id": variant_id, "stock": 0}

    matrix = client.get(f"/v1/catalog/products/{product_id}/matrix").json()
    assert matrix["rows"][0]["cells"][0]["orderable"] is False


def test_order_status_transitions(client, bota, token_for):
    _add_bota_to_cart(client, bota.id)
    buyer = _auth(token_for("BUYER", user_id="b-1"))
    order_id = client.post(
        "/v1/checkout", json={"name": "Ana", "phone": "477"}, headers={**CART, **buyer}
    ).json()["order_id"]

    mine = client.get("/v1/orders/mine", headers=buyer).json()
    assert [o["id"] for o in mine] == [order_id]

    seller = _auth(token_for("SELLER"))
    orders = client.get("/v1/orders", headers=seller).json()
    assert orders[0]["status"] == "PENDING"
    assert orders[0]["lead"] == "Ana"

    r = client.put(f"/v1/orders/{order_id}/status", json={"status": "SHIPPED"}, headers=seller)
    assert r.status_code == 409

    r = client.put(f"/v1/orders/{order_id}/status", json={"status": "PAID"}, headers=seller)
    assert r.status_code == 200
    assert r.json()["status"] == "PAID"


def test_customer_with_price_list(client, db_session, company, token_for):
    pl = PriceList(company_id="default", name="Mayoreo")
    db_session.add(pl)
    db_session.commit()

    headers = _auth(token_for("SELLER", user_id="s-7"))
    r = client.post(
        "/v1/customers",
        json={"business_name": "Zapatería Lupita", "price_list_id": pl.id},
        headers=headers,
    )
    assert r.status_code == 200

    customers = client.get("/v1/customers", headers=headers).json()
    assert customers[0]["seller_id"] == "s-7"
    assert customers[0]["price_list"]["name"] == "Mayoreo"


# ---------- NAVIGATION ----------
def test_navigation_menu_and_resolve(client, token_for):
    r = client.get("/v1/navigation/menu")
    assert r.status_code == 401

    r = client.get("/v1/navigation/menu", headers=_auth(token_for("SELLER")))
    assert [i["href"] for i in r.json()["items"]] == ["/admin", "/", "/admin/orders"]

    r = client.get(
        "/v1/navigation/resolve",
        params={"path": "/admin/settings"},
        headers=_auth(token_for("BUYER")),
    )
    assert r.json() == {
        "route": "/admin/settings",
        "action": "REDIRECT",
        "state": "UNAUTHORIZED",
        "redirect_to": "/",
    }

    r = client.get("/v1/navigation/resolve", params={"path": "/admin"})
    assert r.json()["redirect_to"] == "/login"
