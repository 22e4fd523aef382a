from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller
from schoolapp.auth.dependencies import get_current_caller
from schoolapp.auth.schemas import CurrentUserResponse, LoginRequest, LoginResponse
from schoolapp.auth.services import get_current_user_info, login_user
from schoolapp.core.exceptions import ServiceError
from schoolapp.db.session import get_db

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=http_status.HTTP_200_OK,
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await login_user(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/login-oauth")
async def login_oauth(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    payload = LoginRequest(
        email=form_data.username.strip(),
        password=form_data.password,
    )
    try:
        result = await login_user(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {
        "access_token": result.access_token,
        "token_type": "bearer",
    }


@router.get("/me", response_model=CurrentUserResponse)
async def me(
    db: AsyncSession = Depends(get_db),
    caller: Caller = Depends(get_current_caller),
) -> CurrentUserResponse:
    return await get_current_user_info(db, caller)
