# menova/routes/auth_routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Body, Request, status
from sqlalchemy.orm import Session

from menova.db.session import get_db
from menova.models.user import User
from menova.auth.jwt import verify_password, create_access_token, create_refresh_token, verify_refresh_token, hash_password
from menova.auth.schemas import RefreshIn, Token, UserCreate, UserLogin
from menova.utils.rate_limit import limiter

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger("menova")


def _tokens_for(user: User) -> Token:
    claims = {"sub": str(user.id), "email": user.email}
    return Token(access_token=create_access_token(claims), refresh_token=create_refresh_token(claims))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, payload: UserCreate = Body(...), db: Session = Depends(get_db)):
    """Create an account and sign it in."""
    email = str(payload.email).lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=409, detail="User with this email already exists")

    user = User(
        email=email,
        hashed_password=hash_password(payload.password),
        name=(payload.name or "").strip() or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info({"function": "register", "status": "created", "user_id": user.id})
    return _tokens_for(user)


@router.post("/login", response_model=Token)
@limiter.limit("20/minute")
def login(request: Request, payload: UserLogin = Body(...), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == str(payload.email).lower()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _tokens_for(user)


@router.post("/refresh", response_model=Token)
def refresh(payload: RefreshIn, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new access token."""
    data = verify_refresh_token(payload.refresh_token)
    if not data:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    user = db.query(User).filter(User.id == str(data["sub"])).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    access = create_access_token({"sub": str(user.id), "email": user.email})
    return Token(access_token=access)
