from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Role:
    CUSTOMER = "customer"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
    COURIER = "courier"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPERADMIN})
DELIVERY_ROLES = frozenset({Role.COURIER, Role.ADMIN, Role.SUPERADMIN})


class AuthUser(BaseModel):
    """
    The principal carried by a session token.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    role: str = Role.CUSTOMER
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
