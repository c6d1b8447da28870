# api/auth.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import auth_service
from database import get_db
from models import User
from schemas import AuthResponse, UserCreate, UserLogin, UserOut


router = APIRouter(prefix="/api/auth", tags=["auth"])


# Register
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: UserCreate, db: Session = Depends(get_db)):
    user, token = auth_service.register(db, body.email, body.password)
    return {"token": token, "token_type": "bearer", "user": user}


# Login
@router.post("/login", response_model=AuthResponse)
def login(body: UserLogin, db: Session = Depends(get_db)):
    user, token = auth_service.login(db, body.email, body.password)
    return {"token": token, "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(auth_service.get_current_user)):
    return current_user
