from decimal import Decimal, InvalidOperation
from enum import Enum
from pydantic import BaseModel, conint, constr, field_validator

from bitrewards.schemas.user_schema import MAX_ROW_ID

MAX_AMOUNT = Decimal("1e17")


class ApprovalAction(str, Enum):
    approve = "approve"
    reject = "reject"


class WithdrawalCreate(BaseModel):
    Amount: Decimal
    # Same limits as the Transactions.Method and Transactions.Details columns
    Method: constr(max_length=100) = ""  # type: ignore
    Details: constr(max_length=500) = ""  # type: ignore

    @field_validator("Amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("Invalid Amount")
        try:
            value = Decimal(str(v).strip())
            # Whole cents only, within DECIMAL(19, 2)
            valid = (
                value.is_finite()
                and Decimal("0") < value < MAX_AMOUNT
                and value == value.quantize(Decimal("0.01"))
            )
        except (InvalidOperation, ValueError):
            raise ValueError("Invalid Amount")
        if not valid:
            raise ValueError("Invalid Amount")
        return value


class WithdrawalReview(BaseModel):
    TxID: conint(ge=1, le=MAX_ROW_ID)  # type: ignore
    Action: ApprovalAction
