from fastapi import APIRouter, Depends

from auth.domain.entities import Principal
from auth.domain.permissions import permissions_for
from auth.interfaces.schemas import MeResponse, PrincipalResponse
from shared.dependencies import get_current_principal

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/me", response_model=MeResponse)
async def me(current_user: Principal = Depends(get_current_principal)):
    return MeResponse(
        user=PrincipalResponse.model_validate(current_user),
        permissions=permissions_for(current_user.role),
    )
