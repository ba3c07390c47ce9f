"""Current-user identity."""

from typing import Optional

from pydantic import BaseModel, Field

from .delegation import UserRole
from .lesson import TenantScope


class UserIdentity(BaseModel):
    """The user a request acts for."""

    user_id: str = Field(min_length=1)
    role: UserRole = UserRole.RESOURCE
    scope: TenantScope = Field(default_factory=TenantScope)

    @property
    def school_id(self) -> Optional[str]:
        return self.scope.school_id
