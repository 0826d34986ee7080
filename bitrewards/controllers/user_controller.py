import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bitrewards.core import config
from bitrewards.core.auth import hash_password, verify_password
from bitrewards.core.exceptions import UsernameTaken
from bitrewards.models.user import User
from bitrewards.schemas.user_schema import UserCreate, UserLogin

logger = logging.getLogger(__name__)


def get_user_by_username(username: str, db: Session) -> Optional[User]:
    return db.query(User).filter(User.Username == username).first()


def register_user(user: UserCreate, db: Session) -> User:
    if get_user_by_username(user.Username, db):
        raise UsernameTaken(user.Username)

    new_user = User(
        Username=user.Username,
        Password=hash_password(user.Password),
        Balance=0,
        IsAdmin=False,
    )
    try:
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
    except IntegrityError:
        # Lost a race against a concurrent registration for the same name
        db.rollback()
        raise UsernameTaken(user.Username)

    logger.info("Registered user %s (id=%s)", new_user.Username, new_user.UserID)
    return new_user


def authenticate_user(credentials: UserLogin, db: Session) -> Optional[User]:
    user = get_user_by_username(credentials.Username, db)
    if not user or not verify_password(credentials.Password, user.Password):
        return None
    return user


def seed_admin(db: Session) -> Optional[User]:
    """Create the configured administrator account if it does not exist yet."""
    if not config.ADMIN_USER or not config.ADMIN_PASS:
        return None

    if get_user_by_username(config.ADMIN_USER, db):
        return None

    admin = User(
        Username=config.ADMIN_USER,
        Password=hash_password(config.ADMIN_PASS),
        Balance=0,
        IsAdmin=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Admin account created from environment: %s", admin.Username)
    return admin
