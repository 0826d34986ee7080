import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import desc, func, update
from sqlalchemy.orm import Session, joinedload

from bitrewards.models.transaction import (
    STATUS_APPROVED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_REJECTED,
    Transaction,
)
from bitrewards.models.user import User
from bitrewards.schemas.user_schema import BalanceUpdate
from bitrewards.schemas.withdrawal_schema import ApprovalAction, WithdrawalReview

logger = logging.getLogger(__name__)


def get_all_users(db: Session) -> List[User]:
    return db.query(User).filter(User.IsAdmin.is_(False)).order_by(User.UserID).all()


def get_all_transactions(db: Session) -> List[Transaction]:
    return (
        db.query(Transaction)
        .options(joinedload(Transaction.User))
        .order_by(desc(Transaction.Date), desc(Transaction.TransactionID))
        .all()
    )


def set_user_balance(balance_update: BalanceUpdate, db: Session) -> Optional[User]:
    user = db.query(User).filter(User.UserID == balance_update.UserID).first()
    if not user:
        logger.warning("Balance update for unknown user %s ignored", balance_update.UserID)
        return None

    previous = user.Balance
    user.Balance = balance_update.NewBalance
    db.commit()
    db.refresh(user)
    logger.info(
        "Balance of user %s set from %s to %s", user.UserID, previous, user.Balance
    )
    return user


def _debit_if_covered(user_id: int, amount: Decimal, db: Session) -> bool:
    # Single conditional UPDATE so concurrent approvals cannot both pass the balance check.
    # Both sides are rounded to cents; SQLite stores Numeric as binary floats.
    balance = func.round(User.Balance, 2, type_=User.Balance.type)
    result = db.execute(
        update(User)
        .where(User.UserID == user_id, balance >= amount)
        .values(Balance=func.round(User.Balance - amount, 2, type_=User.Balance.type))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def _claim_pending(transaction_id: int, new_status: str, db: Session) -> bool:
    result = db.execute(
        update(Transaction)
        .where(
            Transaction.TransactionID == transaction_id,
            Transaction.Status == STATUS_PENDING,
        )
        .values(Status=new_status)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def review_withdrawal(review: WithdrawalReview, db: Session) -> Optional[Transaction]:
    """Approve or reject a pending withdrawal.

    Rejection only changes the status. Approval debits the owner's balance by
    the requested amount if, and only if, the current balance covers it;
    otherwise the transaction ends as failed and the balance is untouched.
    A transaction that is no longer pending is left as it is.
    """
    tx = db.query(Transaction).filter(Transaction.TransactionID == review.TxID).first()
    if not tx:
        logger.warning("Review of unknown transaction %s ignored", review.TxID)
        return None

    try:
        if review.Action == ApprovalAction.reject:
            claimed = _claim_pending(tx.TransactionID, STATUS_REJECTED, db)
        elif _claim_pending(tx.TransactionID, STATUS_APPROVED, db):
            claimed = True
            if not _debit_if_covered(tx.UserID, tx.Amount, db):
                db.execute(
                    update(Transaction)
                    .where(Transaction.TransactionID == tx.TransactionID)
                    .values(Status=STATUS_FAILED)
                    .execution_options(synchronize_session=False)
                )
        else:
            claimed = False
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire_all()
    db.refresh(tx)
    if claimed:
        logger.info(
            "Transaction %s reviewed (%s): status=%s",
            tx.TransactionID,
            review.Action.value,
            tx.Status,
        )
    else:
        logger.warning(
            "Transaction %s already %s, %s ignored",
            tx.TransactionID,
            tx.Status,
            review.Action.value,
        )
    return tx
