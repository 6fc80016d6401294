"""Admin auth API router — password login and the current identity."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin, get_db
from app.api.responses import ok
from app.auth.jwt import create_admin_token
from app.auth.verifier import AdminIdentity
from app.schemas.auth import AdminResponse, LoginRequest, TokenResponse
from app.schemas.common import Envelope
from app.services import admin_service

router = APIRouter(prefix="/api/v1/admin/auth", tags=["admin-auth"])


@router.post("/login", response_model=Envelope[TokenResponse])
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    """Exchange an admin email and password for a bearer access token."""
    admin = await admin_service.authenticate(db, body.email, body.password)
    return ok(create_admin_token(admin.id, admin.role, settings=request.app.state.settings))


@router.get("/me", response_model=Envelope[AdminResponse])
async def me(identity: AdminIdentity = Depends(get_current_admin)) -> dict:
    """Return the admin behind the bearer token."""
    return ok(identity)
