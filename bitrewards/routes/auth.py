# bitrewards/routes/auth.py
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

# Controllers
from bitrewards.controllers.user_controller import authenticate_user, register_user

# Schemas
from bitrewards.schemas.user_schema import UserCreate, UserLogin

# Core
from bitrewards.core import config
from bitrewards.core.auth import end_session, start_session
from bitrewards.core.database import get_db
from bitrewards.core.exceptions import UsernameTaken
from bitrewards.core.i18n import SUPPORTED_LANGUAGES
from bitrewards.core.rate_limiter import limiter
from bitrewards.core.templating import render

router = APIRouter()


@router.get("/")
def root():
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/set-lang/{code}")
def set_language(request: Request, code: str):
    response = RedirectResponse(
        request.headers.get("referer") or "/dashboard",
        status_code=status.HTTP_303_SEE_OTHER,
    )
    if code in SUPPORTED_LANGUAGES:
        response.set_cookie(
            config.LANG_COOKIE_NAME, code, max_age=config.LANG_COOKIE_MAX_AGE
        )
    return response


@router.get("/login")
def login_page(request: Request):
    return render(request, "login.html")


@router.post("/login")
@limiter.limit(config.RATE_LIMIT_LOGIN)
def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    user = authenticate_user(UserLogin(Username=username, Password=password), db)
    if not user:
        return render(request, "login.html", {"error": "Invalid credentials"})

    target = "/admin" if user.IsAdmin else "/dashboard"
    response = RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
    start_session(request, response, user.UserID)
    return response


@router.get("/register")
def register_page(request: Request):
    return render(request, "register.html")


@router.post("/register")
@limiter.limit(config.RATE_LIMIT_LOGIN)
def register(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    try:
        new_user = register_user(UserCreate(Username=username, Password=password), db)
    except ValidationError:
        return render(
            request, "register.html", {"error": "Username and password are required"}
        )
    except UsernameTaken:
        return render(request, "register.html", {"error": "Username taken"})

    # Auto-login after sign up
    response = RedirectResponse("/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    start_session(request, response, new_user.UserID)
    return response


@router.get("/logout")
def logout(request: Request):
    response = RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)
    end_session(request, response)
    return response


@router.get("/about-us")
def about_us(request: Request):
    return render(request, "about_us.html")
