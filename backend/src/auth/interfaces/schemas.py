from auth.domain.entities import Role
from auth.domain.permissions import Permission
from shared.schemas import CamelModel


class PrincipalResponse(CamelModel):
    id: str
    display_name: str
    role: Role
    email: str | None = None


class MeResponse(CamelModel):
    user: PrincipalResponse
    permissions: list[Permission]
