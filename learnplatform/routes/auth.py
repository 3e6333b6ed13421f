# learnplatform/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User
from ..schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from ..security import create_access_token, get_current_user, get_password_hash, verify_password
from .common import commit_or_400

logger = logging.getLogger(__name__)

router = APIRouter()


def auth_response(user: User) -> AuthResponse:
    return AuthResponse(user=UserOut.model_validate(user), token=create_access_token(user))


@router.post("/register", response_model=AuthResponse, status_code=201)
def register_user(data: RegisterRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.username == data.username).first():
        raise HTTPException(status_code=400, detail="اسم المستخدم موجود بالفعل")
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(status_code=400, detail="البريد الإلكتروني مستخدم بالفعل")

    user = User(
        username=data.username,
        password=get_password_hash(data.password),
        email=data.email,
        name=data.name,
        role="student",
    )
    db.add(user)
    commit_or_400(db, "اسم المستخدم أو البريد الإلكتروني موجود بالفعل")
    db.refresh(user)
    logger.info("Registered user %s", user.username)
    return auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == data.username).first()
    if not user or not verify_password(data.password, user.password):
        logger.info("Failed login for %s", data.username)
        raise HTTPException(status_code=401, detail="اسم المستخدم أو كلمة المرور غير صحيحة")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="الحساب معطل")
    return auth_response(user)


@router.get("/me", response_model=UserOut)
def read_current_user(user: User = Depends(get_current_user)):
    return user
