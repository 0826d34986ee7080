from decimal import Decimal, InvalidOperation
from pydantic import BaseModel, conint, constr, field_validator

# Largest id a signed 64-bit INTEGER column can hold
MAX_ROW_ID = 2**63 - 1
MAX_BALANCE = Decimal("1e17")


class UserCreate(BaseModel):
    Username: constr(strip_whitespace=True, min_length=1, max_length=50)  # type: ignore
    Password: constr(min_length=1, max_length=255)  # type: ignore


class UserLogin(BaseModel):
    Username: str
    Password: str


class BalanceUpdate(BaseModel):
    UserID: conint(ge=1, le=MAX_ROW_ID)  # type: ignore
    NewBalance: Decimal

    @field_validator("NewBalance", mode="before")
    @classmethod
    def parse_balance(cls, v):
        try:
            value = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            raise ValueError("Balance must be a number")
        if not value.is_finite() or abs(value) >= MAX_BALANCE:
            raise ValueError("Balance must be a number")
        return value
