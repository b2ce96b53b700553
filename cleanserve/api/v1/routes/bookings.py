from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from cleanserve.db.session import get_db
from cleanserve.api.deps import get_current_user, require_roles, get_language
from cleanserve.api.responses import ok
from cleanserve.models.user import User
from cleanserve.schemas.booking import BookingCreate, TechnicianStatusUpdate
from cleanserve.services.booking_service import create_booking, get_booking_detail
from cleanserve.services.order_status_service import update_status_by_technician, accept_booking

router = APIRouter(tags=["bookings"])

@router.post("/bookings/create", status_code=201)
def create(body: BookingCreate, db: Session = Depends(get_db),
           me: User = Depends(require_roles("customer")), lang: str = Depends(get_language)):
    return ok("booking.created_successfully", create_booking(db, me, body, lang))

@router.get("/bookings/{booking_id}")
def detail(booking_id: str, db: Session = Depends(get_db),
           me: User = Depends(get_current_user), lang: str = Depends(get_language)):
    return ok("booking.retrieved_successfully", get_booking_detail(db, me, booking_id, lang))

@router.put("/bookings/{booking_id}/status")
def technician_status(booking_id: str, body: TechnicianStatusUpdate, db: Session = Depends(get_db),
                      me: User = Depends(require_roles("technician")), lang: str = Depends(get_language)):
    data = update_status_by_technician(db, me, booking_id, body.status, body.message, body.message_ar, lang)
    return ok("orders.status_updated", data)

@router.post("/bookings/{booking_id}/accept")
def technician_accept(booking_id: str, db: Session = Depends(get_db),
                      me: User = Depends(require_roles("technician")), lang: str = Depends(get_language)):
    return ok("orders.accepted_successfully", accept_booking(db, me, booking_id, lang))
