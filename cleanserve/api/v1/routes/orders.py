from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from cleanserve.db.session import get_db
from cleanserve.api.deps import get_current_user, require_roles, get_language
from cleanserve.api.responses import ok
from cleanserve.models.user import User
from cleanserve.services.booking_service import list_customer_orders, list_technician_orders, get_order_status

router = APIRouter(tags=["orders"])

@router.get("/orders")
def my_orders(status: str | None = Query(default=None), limit: int = Query(default=50, ge=1, le=100),
              db: Session = Depends(get_db), me: User = Depends(require_roles("customer")),
              lang: str = Depends(get_language)):
    return ok("orders.retrieved_successfully", list_customer_orders(db, me, status, limit, lang))

@router.get("/orders/{booking_id}/status")
def order_status(booking_id: str, db: Session = Depends(get_db),
                 me: User = Depends(get_current_user), lang: str = Depends(get_language)):
    return ok("orders.status_retrieved", get_order_status(db, me, booking_id, lang))

@router.get("/technician/orders")
def technician_orders(scope: str = Query(default="assigned", pattern="^(assigned|available)$"),
                      status: str | None = Query(default=None), db: Session = Depends(get_db),
                      me: User = Depends(require_roles("technician")), lang: str = Depends(get_language)):
    return ok("orders.technician_orders_retrieved", list_technician_orders(db, me, scope, status, lang))
