# clinic_queue/routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from .. import schemas, security, storage

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


def issue_token(user: storage.User) -> dict:
    token = security.create_access_token(data={"sub": user.username, "role": user.role})
    return {
        "access_token": token,
        "token_type": "bearer",
        "role": user.role,
        "full_name": user.full_name,
    }


@router.post("/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, db: Session = Depends(storage.get_db)):
    if security.get_user(db, user.username):
        raise HTTPException(status_code=400, detail="Username already registered.")

    new_user = storage.User(
        username=user.username,
        hashed_password=security.hash_password(user.password),
        full_name=user.full_name,
        role=user.role.value,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return issue_token(new_user)


@router.post("/login", response_model=schemas.Token)
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(storage.get_db)):
    user = security.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated")
    return issue_token(user)


@router.get("/profile", response_model=schemas.UserResponse)
def profile(current_user: storage.User = Depends(security.get_current_user)):
    return current_user
