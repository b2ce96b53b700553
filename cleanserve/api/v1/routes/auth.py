from fastapi import APIRouter, Depends
from cleanserve.api.deps import get_current_user, get_language
from cleanserve.api.responses import ok
from cleanserve.models.user import User

router = APIRouter(tags=["auth"])

@router.get("/auth/me")
def me(me: User = Depends(get_current_user), lang: str = Depends(get_language)):
    """Return current user info including role and resolved language."""
    return ok("auth.profile_retrieved", {
        "id": me.id,
        "email": me.email,
        "full_name": me.full_name or "",
        "role": me.role,
        "language": lang,
        "referral_code": me.referral_code,
    })
