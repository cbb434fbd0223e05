from decimal import Decimal

from pydantic import BaseModel, Field


class VariantRead(BaseModel):
    id: int
    size: str
    color: str
    stock: int = Field(ge=0)

    class Config:
        from_attributes = True


class ImageRead(BaseModel):
    id: int | None = None
    url: str
    is_primary: bool = False

    class Config:
        from_attributes = True


class ProductRead(BaseModel):
    id: int
    company_id: str
    name: str
    sku: str
    description: str | None = None
    category: str | None = None
    price: Decimal = Field(ge=0)  # resolved once per product, see catalog.resolve_price
    variants: list[VariantRead] = Field(default_factory=list)
    images: list[ImageRead] = Field(default_factory=list)

    class Config:
        from_attributes = True

    @property
    def image_ref(self) -> str:
        return self.images[0].url if self.images else ""
