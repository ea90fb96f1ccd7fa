# expense_tracker/schemas/user.py
from typing import Annotated, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


# Fields accepted on POST /api/register
class UserCreate(BaseModel):
    username: Username
    email: EmailStr
    password: str = Field(..., min_length=1)


# Fields accepted on POST /api/login
class UserLogin(BaseModel):
    username: Username
    password: str = Field(..., min_length=1)


# Public fields; the password hash is never serialised
class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None


class SessionUser(BaseModel):
    id: int
    username: str


class LoginResponse(BaseModel):
    message: str
    user: SessionUser


class Message(BaseModel):
    message: str
