import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, enum.Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


class AuthUser(BaseModel):
    """
    The caller, as identified by the bearer token issued by the auth service.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    role: Role = Role.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES
