import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.responses import Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from bitrewards.core import config
from bitrewards.core.database import get_db
from bitrewards.core.exceptions import AdminRequired, LoginRequired
from bitrewards.core.sessions import SessionStore, new_session_id
from bitrewards.models.user import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _prepare_password(password: str) -> str:
    """Bcrypt has a 72-byte limit. Pre-hash longer passwords with SHA256."""
    encoded = password.encode("utf-8")
    if len(encoded) > 72:
        return hashlib.sha256(encoded).hexdigest()
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(_prepare_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_prepare_password(plain), hashed)


def create_session_token(session_id: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(seconds=config.SESSION_MAX_AGE)
    payload = {"sid": session_id, "exp": expire}
    return jwt.encode(payload, config.SESSION_SECRET, algorithm=config.SESSION_ALGORITHM)


def decode_session_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    try:
        payload = jwt.decode(
            token, config.SESSION_SECRET, algorithms=[config.SESSION_ALGORITHM]
        )
    except JWTError:
        return None
    return payload.get("sid")


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def start_session(request: Request, response: Response, user_id: int) -> str:
    """Open a fresh server-side session for ``user_id`` and hand its token to the client."""
    store = get_session_store(request)
    previous = getattr(request.state, "session_id", None)
    if previous:
        store.destroy(previous)

    session_id = new_session_id()
    store.set(session_id, user_id)
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        create_session_token(session_id),
        max_age=config.SESSION_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=config.IS_PRODUCTION,
    )
    return session_id


def end_session(request: Request, response: Response) -> None:
    session_id = getattr(request.state, "session_id", None)
    if session_id:
        get_session_store(request).destroy(session_id)
    response.delete_cookie(config.SESSION_COOKIE_NAME)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise LoginRequired()

    user = db.query(User).filter(User.UserID == user_id).first()
    if user is None:
        raise LoginRequired()
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.IsAdmin:
        raise AdminRequired()
    return current_user
