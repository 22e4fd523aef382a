from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolapp.access.identity import Caller, resolve_caller
from schoolapp.auth.security import decode_access_token
from schoolapp.core.exceptions import NotFoundError, ProfileMissingError
from schoolapp.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


async def get_current_caller(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Caller:
    """Resolve the bearer token's subject (email) into a role-tagged caller."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    email = payload.get("sub")
    if not email:
        raise credentials_exception

    try:
        return await resolve_caller(db, email)
    except NotFoundError:
        # Unknown or disabled account is an authentication failure at the HTTP edge.
        raise credentials_exception
    except ProfileMissingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
