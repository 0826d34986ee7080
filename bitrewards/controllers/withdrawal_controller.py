import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session, joinedload

from bitrewards.core.exceptions import WithdrawalError
from bitrewards.models.transaction import STATUS_PENDING, Transaction
from bitrewards.models.user import User
from bitrewards.schemas.withdrawal_schema import WithdrawalCreate

logger = logging.getLogger(__name__)

VAT_RATE = Decimal("0.075")
CENTS = Decimal("0.01")


def compute_vat_fee(amount: Decimal) -> Decimal:
    return (Decimal(amount) * VAT_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_balance(balance) -> str:
    return f"{Decimal(str(balance or 0)):.2f}"


def create_withdrawal(user: User, withdrawal: WithdrawalCreate, db: Session) -> Transaction:
    """Record a pending withdrawal for ``user``.

    The balance is only checked here, not debited. The debit happens when an
    administrator approves the request, against the balance at that time.
    """
    amount = withdrawal.Amount
    if amount > user.Balance:
        raise WithdrawalError(
            f"Insufficient funds. Balance: €{format_balance(user.Balance)}"
        )

    new_tx = Transaction(
        UserID=user.UserID,
        Type="withdrawal",
        Amount=amount,
        VatFee=compute_vat_fee(amount),
        Method=withdrawal.Method,
        Details=withdrawal.Details,
        Status=STATUS_PENDING,
    )
    db.add(new_tx)
    db.commit()
    db.refresh(new_tx)

    logger.info(
        "Withdrawal request %s created for user %s: amount=%s vat=%s",
        new_tx.TransactionID,
        user.UserID,
        new_tx.Amount,
        new_tx.VatFee,
    )
    return new_tx


def get_user_transactions(user_id: int, db: Session) -> List[Transaction]:
    return (
        db.query(Transaction)
        .filter(Transaction.UserID == user_id)
        .order_by(desc(Transaction.Date), desc(Transaction.TransactionID))
        .all()
    )


def get_invoice(transaction_id: int, viewer: User, db: Session) -> Optional[Transaction]:
    tx = (
        db.query(Transaction)
        .options(joinedload(Transaction.User))
        .filter(Transaction.TransactionID == transaction_id)
        .first()
    )
    if tx is None:
        return None
    # Invoices are private to their owner and administrators
    if tx.UserID != viewer.UserID and not viewer.IsAdmin:
        return None
    return tx
