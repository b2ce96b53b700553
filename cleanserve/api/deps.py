from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from cleanserve.db.session import get_db
from cleanserve.core.config import settings
from cleanserve.core.i18n import normalize_language
from cleanserve.core.security import decode_token
from cleanserve.models.user import User

bearer = HTTPBearer(auto_error=False)

def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> User:
    if not creds:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    user_id = payload.get("sub")
    user = db.get(User, user_id) if user_id else None
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")
    return user

def require_roles(*roles: str):
    def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user
    return _guard

def get_language(
    accept_language: str | None = Header(default=None),
    user: User = Depends(get_current_user),
) -> str:
    """Accept-Language header first, then the user's profile language."""
    fallback = normalize_language(user.language, settings.DEFAULT_LANGUAGE)
    return normalize_language(accept_language, fallback)
