from sqlalchemy import Column, Integer, String, DateTime, Boolean, DECIMAL
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, text
from bitrewards.core.database import Base


class User(Base):
    __tablename__ = "Users"

    UserID = Column(Integer, primary_key=True, index=True)
    Username = Column(String(50), unique=True, nullable=False)
    Password = Column(String(255), nullable=False)
    Balance = Column(DECIMAL(19, 2), nullable=False, server_default=text("0"), default=0)
    IsAdmin = Column(Boolean, nullable=False, default=False)
    CreatedAt = Column(DateTime, server_default=func.now())

    Transactions = relationship("Transaction", back_populates="User")
