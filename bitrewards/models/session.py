from sqlalchemy import Column, Integer, String, DateTime
from bitrewards.core.database import Base


class UserSession(Base):
    __tablename__ = "Sessions"

    SessionID = Column(String(64), primary_key=True)
    UserID = Column(Integer, nullable=False, index=True)
    ExpiresAt = Column(DateTime(timezone=True), nullable=False)
