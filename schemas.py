# schemas.py
from pydantic import BaseModel, ConfigDict, Field, constr, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


class CurrentUser(BaseModel):
    user_id: str
    name: Optional[str] = None


class CamelModel(BaseModel):
    """Reads and writes camelCase JSON keys, e.g. ``splitWith``, ``hasPaid``."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class SplitParticipant(CamelModel):
    user_id: Optional[str] = None
    name: Optional[str] = None


class ExpenseCreate(CamelModel):
    amount: Decimal = Field(gt=0)
    category: constr(min_length=1)
    date: Optional[datetime] = None
    description: Optional[str] = None
    split_with: List[SplitParticipant] = Field(default_factory=list)


class ExpenseUpdate(CamelModel):
    amount: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[constr(min_length=1)] = None
    date: Optional[datetime] = None
    description: Optional[str] = None


class StatusUpdate(CamelModel):
    expense_id: int
    detail_index: Optional[int] = Field(default=None, ge=0)
    detail_id: Optional[int] = None
    has_paid: bool

    @model_validator(mode="after")
    def check_detail_reference(self):
        if (self.detail_index is None) == (self.detail_id is None):
            raise ValueError("Provide exactly one of detailIndex or detailId")
        return self


class SplitDetail(CamelModel):
    id: int
    user_id: Optional[str] = None
    name: str
    share: float
    has_paid: bool


class Expense(CamelModel):
    id: int
    user_id: str
    amount: float
    amount_left_to_be_paid: float
    category: str
    date: datetime
    description: Optional[str] = None
    split_details: List[SplitDetail]


class StatusUpdateResponse(CamelModel):
    message: str
    expense: Expense


class ExpenseListResponse(CamelModel):
    expenses: List[Expense]
    total_amount_spent: float
    total_amount_left_to_be_paid: float
    individual_balances: Dict[str, float]


class CategoryAmount(CamelModel):
    category: str
    amount: float


class DateAmount(CamelModel):
    date: str
    amount: float


class AnalysisResponse(CamelModel):
    total_amount: float
    category_wise: Dict[str, float]
    date_wise: Dict[str, float]
    monthly_wise: Dict[str, float]
    highest_category: Optional[CategoryAmount] = None
    lowest_category: Optional[CategoryAmount] = None
    highest_date: Optional[DateAmount] = None
    lowest_date: Optional[DateAmount] = None


class Message(BaseModel):
    message: str
