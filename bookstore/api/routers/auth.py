# bookstore/api/routers/auth.py
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from bookstore.api.deps import get_current_principal, get_token_claims, rate_limit
from bookstore.api.responses import envelope
from bookstore.data.database import get_db
from bookstore.domain.schemas import ApiResponse, AuthOut, ChangePasswordIn, LoginIn, Profile, RegisterIn
from bookstore.services.auth_service import AuthService
from bookstore.services.identity import Principal
from bookstore.utils.settings import JWT_EXPIRES_SECONDS

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_token_cookie(response: Response, token: str):
    response.set_cookie("token", token, max_age=JWT_EXPIRES_SECONDS, httponly=True, samesite="lax")


@router.post(
    "/register",
    response_model=ApiResponse[AuthOut],
    status_code=201,
    dependencies=[Depends(rate_limit("register"))],
)
def register(payload: RegisterIn, response: Response, db: Session = Depends(get_db)):
    session = AuthService(db).register(payload)
    _set_token_cookie(response, session["token"])
    return envelope(session, "Registration successful")


@router.post("/login", response_model=ApiResponse[AuthOut], dependencies=[Depends(rate_limit("login"))])
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    session = AuthService(db).login(payload.email, payload.password)
    _set_token_cookie(response, session["token"])
    return envelope(session, "Login successful")


@router.post("/logout", response_model=ApiResponse[None])
def logout(response: Response):
    # tokens are stateless, logging out only drops the cookie
    response.delete_cookie("token")
    return envelope(None, "Logout successful")


@router.get("/verify", response_model=ApiResponse[dict])
def verify(claims: dict = Depends(get_token_claims)):
    return envelope(claims, "Token is valid")


@router.get("/profile", response_model=ApiResponse[Profile])
def profile(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return envelope(AuthService(db).get_profile(principal.auth_id))


@router.put(
    "/change-password",
    response_model=ApiResponse[None],
    dependencies=[Depends(rate_limit("change_password"))],
)
def change_password(
    payload: ChangePasswordIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    AuthService(db).change_password(principal.auth_id, payload.current_password, payload.new_password)
    return envelope(None, "Password changed successfully")
