from datetime import datetime
from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, field_serializer, field_validator
from sqlalchemy.orm import Session
from todo_platform.core.database import get_identity_db
from todo_platform.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])

PASSWORD_MIN_LENGTH = 6


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email address")
    # Stored exactly as given
    return value


class RegisterRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_is_long_enough(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        # bcrypt rejects NUL bytes; refuse them here instead of failing at hash time
        if "\x00" in value:
            raise ValueError("Password must not contain NUL characters")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Password is required")
        return value


class UserPublic(BaseModel):
    id: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime, _info):
        return value.isoformat() if value else None


class UserSummary(BaseModel):
    id: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    data: UserPublic


class LoginData(BaseModel):
    user: UserSummary
    token: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    data: LoginData


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: Session = Depends(get_identity_db)):
    """Register a new user. The password hash is never returned."""
    # Response carries id, email and created_at only - never the hash
    user = auth_service.register(body.email, body.password, db)
    return RegisterResponse(
        message="User registered successfully",
        data=UserPublic.model_validate(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, db: Session = Depends(get_identity_db)):
    """Check credentials and return a bearer token"""
    user, token = auth_service.login(body.email, body.password, db)
    return LoginResponse(
        message="Login successful",
        data=LoginData(user=UserSummary.model_validate(user), token=token),
    )
