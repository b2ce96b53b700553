from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from cleanserve.db.session import get_db
from cleanserve.api.deps import require_roles, get_language
from cleanserve.api.responses import ok
from cleanserve.models.user import User
from cleanserve.schemas.booking import AdminStatusUpdate
from cleanserve.services.order_status_service import update_status_by_admin

router = APIRouter(tags=["admin"])

@router.put("/admin/bookings/{booking_id}/status")
def admin_status(booking_id: str, body: AdminStatusUpdate, db: Session = Depends(get_db),
                 me: User = Depends(require_roles("admin")), lang: str = Depends(get_language)):
    data = update_status_by_admin(db, me, booking_id, body.status, body.reason, body.technician_id, lang)
    return ok("orders.status_updated", data)
