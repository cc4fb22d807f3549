import logging
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from analytics import analyze_for_user
from auth import get_current_user
from balances import reconcile
from config import Settings, get_settings
from crud import delete_expense, edit_expense, get_expense, list_expenses
from database import get_db
from report import XLSX_MEDIA_TYPE, build_report_rows, render_csv, render_workbook
from schemas import (
    AnalysisResponse,
    CurrentUser,
    Expense,
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseUpdate,
    Message,
    StatusUpdate,
    StatusUpdateResponse,
)
from settlement import create_expense, update_settlement_status

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/add", response_model=Expense, status_code=status.HTTP_201_CREATED)
def add_expense(
    expense: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return create_expense(db, expense, current_user)


@router.put("/update-status", response_model=StatusUpdateResponse)
def update_status(
    update: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    expense = update_settlement_status(
        db,
        current_user,
        update.expense_id,
        update.has_paid,
        detail_index=update.detail_index,
        detail_id=update.detail_id,
    )
    return {"message": "Payment status updated", "expense": expense}


@router.get("/fetch", response_model=ExpenseListResponse)
def fetch_expenses(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    expenses = list_expenses(db, current_user.user_id)
    balances = reconcile(expenses, key=settings.balance_key)
    return {
        "expenses": expenses,
        "total_amount_spent": balances.total_amount_spent,
        "total_amount_left_to_be_paid": balances.total_amount_left_to_be_paid,
        "individual_balances": balances.individual_balances,
    }


@router.put("/edit/{expense_id}", response_model=Expense)
def edit(
    expense_id: int,
    changes: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return edit_expense(db, current_user.user_id, expense_id, changes)


@router.delete("/delete/{expense_id}", response_model=Message)
def delete(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    delete_expense(db, current_user.user_id, expense_id)
    return {"message": "Expense deleted"}


@router.get("/analyze", response_model=AnalysisResponse)
def analyze_expenses(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return analyze_for_user(db, current_user.user_id, start_date, end_date)


@router.get("/report")
def export_report(
    report_format: Literal["xlsx", "csv"] = Query("xlsx", alias="format"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Exports the user's expenses with two tables:
    - Expense details with who has paid their share
    - Category-wise totals
    """
    expenses = list_expenses(db, current_user.user_id)
    detail_rows, category_rows = build_report_rows(expenses)
    logger.info(
        "Generating %s report for user %s (%d expenses)",
        report_format,
        current_user.user_id,
        len(expenses),
    )

    if report_format == "csv":
        return StreamingResponse(
            iter([render_csv(detail_rows, category_rows)]),
            media_type="text/csv",
            headers={
                "Content-Disposition": 'attachment; filename="expense_report.csv"'
            },
        )

    return Response(
        content=render_workbook(detail_rows, category_rows),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="expense_report.xlsx"'},
    )


@router.get("/{expense_id}", response_model=Expense)
def get_one(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return get_expense(db, current_user.user_id, expense_id)
