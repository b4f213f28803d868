"""
api/routes/roles.py -- Role listing for the user forms.

Routes (relative to BASE_API_URL):
  GET /roles -- all roles ordered by name (requires auth)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_user_store
from api.models import RoleResponse
from auth.dependencies import get_current_user
from auth.store import UserStore

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/roles", response_model=list[RoleResponse])
def list_roles(store: UserStore = Depends(get_user_store)) -> list[RoleResponse]:
    return [RoleResponse.from_role(r) for r in store.list_roles()]
