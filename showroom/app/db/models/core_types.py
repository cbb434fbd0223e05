import enum

class Role(str, enum.Enum):
    owner = "OWNER"
    admin = "ADMIN"
    supervisor = "SUPERVISOR"
    seller = "SELLER"
    buyer = "BUYER"

    @property
    def canonical(self) -> "Role":
        # ADMIN is a legacy alias of OWNER
        return Role.owner if self is Role.admin else self

class OrderStatus(str, enum.Enum):
    pending = "PENDING"
    paid = "PAID"
    shipped = "SHIPPED"
    cancelled = "CANCELLED"
