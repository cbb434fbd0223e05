from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from showroom.app.api.deps import get_auth_session, get_db
from showroom.app.schemas.product import ProductRead
from showroom.services.catalog import effective_price_list, fetch_catalog, fetch_priced_product
from showroom.services.errors import CustomerNotFound, InvalidPriceList, ProductNotFound, StaffOnly
from showroom.services.navigation import AuthSession
from showroom.services.selection import SelectionMatrix

router = APIRouter(prefix="/catalog")


def load_priced_product(
    db: Session,
    product_id: int,
    auth: AuthSession,
    price_list_id: int | None = None,
    customer_id: int | None = None,
) -> ProductRead:
    """
    Produit + prix de la liste retenue côté serveur.
    price_list_id / customer_id ne sont acceptés que du staff de la société.
    """
    try:
        return fetch_priced_product(
            db,
            product_id,
            principal=auth.principal,
            price_list_id=price_list_id,
            customer_id=customer_id,
        )
    except StaffOnly as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except (ProductNotFound, InvalidPriceList, CustomerNotFound) as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(get_auth_session),
):
    return load_priced_product(db, product_id, auth, price_list_id, customer_id)


@router.get("/products/{product_id}/matrix")
def get_product_matrix(
    product_id: int,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(get_auth_session),
):
    """
    Grille couleurs x tailles (lecture seule, sans quantités en attente).
    """
    product = load_priced_product(db, product_id, auth, price_list_id, customer_id)

    matrix = SelectionMatrix.build(product)
    return {
        "product_id": product.id,
        "price": product.price,
        "sizes": matrix.sizes,
        "colors": matrix.colors,
        "rows": matrix.rows(),
    }


# Public, no token: the storefront of one company
@router.get("/{company_id}", response_model=list[ProductRead])
def public_catalog(
    company_id: str,
    price_list_id: int | None = None,
    customer_id: int | None = None,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(get_auth_session),
):
    try:
        list_id = effective_price_list(
            db,
            company_id,
            principal=auth.principal,
            price_list_id=price_list_id,
            customer_id=customer_id,
        )
    except StaffOnly as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except (InvalidPriceList, CustomerNotFound) as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    return fetch_catalog(db, company_id, price_list_id=list_id)
