import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import config
from database import get_db
from errors import AuthError, ValidationError
from models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# Token creation
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def token_for(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register(db: Session, email: str, password: str):
    """Create a user and return ``(user, token)``.

    Raises ValidationError when the email is already registered.
    """
    email = normalize_email(email)
    if get_user_by_email(db, email):
        raise ValidationError("User already exists")

    user = User(email=email, password=get_password_hash(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent registration won the unique index on users.email
        db.rollback()
        raise ValidationError("User already exists")
    db.refresh(user)

    logger.info("Registered user id=%s", user.id)
    return user, token_for(user)


def login(db: Session, email: str, password: str):
    """Check credentials and return ``(user, token)``.

    Unknown emails and wrong passwords fail the same way so callers
    can't probe which accounts exist.
    """
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        raise AuthError("Invalid credentials")
    return user, token_for(user)


def verify(db: Session, token: Optional[str]) -> User:
    """Resolve a bearer token to its user or raise AuthError."""
    if not token:
        raise AuthError("No token, authorization denied")

    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthError("Token has expired")
    except JWTError:
        raise AuthError("Token is not valid")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        raise AuthError("Token is not valid")

    user = db.get(User, user_id)
    if user is None:
        raise AuthError("Token is not valid")
    return user


# Get current user
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return verify(db, token)
