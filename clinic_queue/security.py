import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from . import config, storage
from .models import Role

logger = logging.getLogger(__name__)

# Password hashing (bcrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# tokenUrl must match the login route
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# --- PASSWORDS ---

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# --- JWT ---

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT carrying data plus an expiry (default from config)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])


# --- USERS ---

def get_user(db: Session, username: str) -> Optional[storage.User]:
    return db.query(storage.User).filter(storage.User.username == username.lower().strip()).first()


def authenticate_user(db: Session, username: str, password: str) -> Optional[storage.User]:
    user = get_user(db, username)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def ensure_admin(db: Session):
    """Create the bootstrap admin account if it does not exist yet."""
    if get_user(db, config.ADMIN_USERNAME):
        return
    db.add(storage.User(
        username=config.ADMIN_USERNAME.lower(),
        hashed_password=hash_password(config.ADMIN_PASSWORD),
        full_name=config.ADMIN_FULL_NAME,
        role=Role.ADMIN.value,
    ))
    db.commit()
    logger.info("Created bootstrap admin user %r", config.ADMIN_USERNAME)


# --- DEPENDENCIES ---

def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(storage.get_db),
) -> storage.User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
    except JWTError:
        # Broken or expired token
        raise credentials_exception

    username = payload.get("sub")
    if username is None:
        raise credentials_exception

    user = get_user(db, username)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


def require_role(allowed_roles: Iterable[Role]):
    allowed = {Role(role).value for role in allowed_roles}

    def role_checker(current_user: storage.User = Depends(get_current_user)):
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' is not allowed to perform this action.",
            )
        return current_user
    return role_checker
