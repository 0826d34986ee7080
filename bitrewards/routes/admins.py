# bitrewards/routes/admins.py
import logging
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

# Controllers
from bitrewards.controllers.admin_controller import (
    get_all_transactions,
    get_all_users,
    review_withdrawal,
    set_user_balance,
)

# Schemas
from bitrewards.schemas.user_schema import BalanceUpdate
from bitrewards.schemas.withdrawal_schema import WithdrawalReview

# Models
from bitrewards.models.user import User

# Core
from bitrewards.core.auth import get_current_admin
from bitrewards.core.database import get_db
from bitrewards.core.templating import render

logger = logging.getLogger(__name__)

router = APIRouter()


def _back_to_admin() -> RedirectResponse:
    return RedirectResponse("/admin", status_code=status.HTTP_303_SEE_OTHER)


@router.get("")
def admin_panel(
    request: Request,
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return render(
        request,
        "admin.html",
        {
            "admin": current_admin,
            "users": get_all_users(db),
            "transactions": get_all_transactions(db),
        },
    )


@router.post("/balance")
def update_balance(
    userId: str = Form(""),
    newBalance: str = Form(""),
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    try:
        balance_update = BalanceUpdate(UserID=userId, NewBalance=newBalance)
    except ValidationError:
        logger.warning(
            "Admin %s sent an invalid balance update for user %r: %r",
            current_admin.UserID,
            userId,
            newBalance,
        )
        return _back_to_admin()
    set_user_balance(balance_update, db)
    return _back_to_admin()


@router.post("/approve")
def approve_withdrawal(
    txId: str = Form(""),
    action: str = Form(""),
    current_admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    try:
        review = WithdrawalReview(TxID=txId, Action=action)
    except ValidationError:
        logger.warning(
            "Admin %s sent an invalid review for transaction %r: %r",
            current_admin.UserID,
            txId,
            action,
        )
        return _back_to_admin()
    review_withdrawal(review, db)
    return _back_to_admin()
