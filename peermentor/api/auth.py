import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from peermentor.crud import user as user_crud
from peermentor.database import get_db
from peermentor.schemas.auth import LoginRequest, RegisterRequest, Token
from peermentor.utils.security import authenticate_user, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ===== REGISTER ENDPOINT =====

@router.post("/register", status_code=201)
def register(user_data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a mentee or a mentor. Mentors wait for admin approval."""
    if user_crud.get_user_by_email(db, user_data.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        user = user_crud.create_user(
            db,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=user_data.email,
            password=user_data.password,
            role=user_data.role,
            bio=user_data.bio,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Registration failed for %s: %r", user_data.email, exc)
        raise HTTPException(status_code=500, detail="Internal server error")

    message = "Registration successful"
    if not user.approved:
        message += ". Your mentor account is awaiting admin approval."
    return {"message": message, "id": user.id, "role": user.role, "approved": user.approved}


# ===== LOGIN ENDPOINT =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    access_token = create_access_token(data={"sub": user.email, "role": user.role})

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "role": user.role
    }
