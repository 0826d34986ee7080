from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship
from bitrewards.core.database import Base

STATUS_PENDING = "Pending"
STATUS_APPROVED = "Approved"
STATUS_REJECTED = "Rejected"
STATUS_FAILED = "Failed (Insufficient Funds)"


def _utcnow():
    return datetime.now(timezone.utc)


class Transaction(Base):
    __tablename__ = "Transactions"

    TransactionID = Column(Integer, primary_key=True, index=True)
    # No cascade: a transaction outlives its user row
    UserID = Column(Integer, ForeignKey("Users.UserID", ondelete="NO ACTION"), nullable=True, index=True)
    Type = Column(String(20), nullable=False, default="withdrawal")
    Amount = Column(DECIMAL(19, 2), nullable=False)
    VatFee = Column(DECIMAL(19, 2), nullable=False)
    Method = Column(String(100), nullable=True)
    Details = Column(String(500), nullable=True)
    Status = Column(String(40), nullable=False, default=STATUS_PENDING)
    Date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    User = relationship("User", back_populates="Transactions")
