from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional


class QuotationPartIn(BaseModel):
    part_id: str
    quantity: int = Field(ge=1)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)  # defaults to the catalog price


class QuotationCreate(BaseModel):
    order_id: str
    spare_parts: List[QuotationPartIn] = []
    additional_cost: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = None
    notes_ar: Optional[str] = None

    @model_validator(mode="after")
    def has_something_to_charge(self):
        if not self.spare_parts and self.additional_cost <= 0:
            raise ValueError("A quotation needs at least one spare part or an additional cost")
        return self


class QuotationReject(BaseModel):
    reason: Optional[str] = None
