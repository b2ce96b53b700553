from fastapi import APIRouter, Depends, Body
from sqlalchemy.orm import Session
from cleanserve.db.session import get_db
from cleanserve.api.deps import require_roles, get_language
from cleanserve.api.responses import ok
from cleanserve.models.user import User
from cleanserve.schemas.quotation import QuotationCreate, QuotationReject
from cleanserve.services.quotation_service import create_quotation, approve_quotation, reject_quotation

router = APIRouter(tags=["quotations"])

@router.post("/quotations/create", status_code=201)
def create(body: QuotationCreate, db: Session = Depends(get_db),
           me: User = Depends(require_roles("technician")), lang: str = Depends(get_language)):
    return ok("quotation.created_successfully", create_quotation(db, me, body, lang))

@router.put("/quotations/{quotation_id}/approve")
def approve(quotation_id: str, db: Session = Depends(get_db),
            me: User = Depends(require_roles("customer")), lang: str = Depends(get_language)):
    return ok("quotation.approved_successfully", approve_quotation(db, me, quotation_id, lang))

@router.put("/quotations/{quotation_id}/reject")
def reject(quotation_id: str, body: QuotationReject | None = Body(default=None), db: Session = Depends(get_db),
           me: User = Depends(require_roles("customer")), lang: str = Depends(get_language)):
    reason = body.reason if body else None
    return ok("quotation.rejected_successfully", reject_quotation(db, me, quotation_id, reason, lang))
