from collections.abc import Generator
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.security import decode_token
from app.db.session import SessionLocal

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenClaims:
    subject: str | None
    colegio_id: str | None


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = request.cookies.get(get_settings().auth_cookie_name)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    colegio_id = payload.get("colegioId")
    return TokenClaims(
        subject=str(subject) if subject is not None else None,
        colegio_id=str(colegio_id) if colegio_id else None,
    )


def get_colegio_id(claims: TokenClaims = Depends(get_token_claims)) -> str:
    if not claims.colegio_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="colegioId missing in token")
    return claims.colegio_id
