# bitrewards/routes/users.py
import re

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

# Controllers
from bitrewards.controllers.withdrawal_controller import (
    create_withdrawal,
    get_invoice,
    get_user_transactions,
)

# Schemas
from bitrewards.schemas.withdrawal_schema import WithdrawalCreate

# Models
from bitrewards.models.user import User

# Core
from bitrewards.core.auth import get_current_user
from bitrewards.core.database import get_db
from bitrewards.core.exceptions import WithdrawalError
from bitrewards.core.templating import render

router = APIRouter()

# ASCII digits only, short enough to fit a 64-bit INTEGER column
TRANSACTION_ID = re.compile(r"[0-9]{1,18}")


def _withdrawal_error(error: ValidationError) -> str:
    if any(err["loc"][:1] == ("Amount",) for err in error.errors()):
        return "Invalid Amount"
    return "Invalid payout details"


@router.get("/dashboard")
def dashboard(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    transactions = get_user_transactions(current_user.UserID, db)
    return render(
        request, "dashboard.html", {"user": current_user, "transactions": transactions}
    )


@router.get("/withdraw")
def withdraw_page(request: Request, current_user: User = Depends(get_current_user)):
    return render(request, "withdraw.html", {"user": current_user})


@router.post("/withdraw/confirm")
def confirm_withdrawal(
    request: Request,
    amount: str = Form(""),
    method: str = Form(""),
    details: str = Form(""),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    form = {"amount": amount, "method": method, "details": details}
    try:
        withdrawal = WithdrawalCreate(Amount=amount, Method=method, Details=details)
        new_tx = create_withdrawal(current_user, withdrawal, db)
    except ValidationError as e:
        return render(
            request,
            "withdraw.html",
            {"user": current_user, "error": _withdrawal_error(e), "form": form},
        )
    except WithdrawalError as e:
        return render(
            request,
            "withdraw.html",
            {"user": current_user, "error": e.message, "form": form},
        )

    return RedirectResponse(
        f"/invoice/{new_tx.TransactionID}", status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/invoice/{transaction_id}")
def invoice(
    request: Request,
    transaction_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tx = None
    if TRANSACTION_ID.fullmatch(transaction_id):
        tx = get_invoice(int(transaction_id), current_user, db)
    if not tx:
        return RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    return render(request, "invoice.html", {"tx": tx})


@router.get("/rewards")
def rewards(request: Request, current_user: User = Depends(get_current_user)):
    return render(request, "rewards.html", {"user": current_user})


@router.get("/invest")
def invest(request: Request, current_user: User = Depends(get_current_user)):
    return render(request, "invest.html", {"user": current_user})
