from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Union

class User(BaseModel):
    id: Union[int, str]
    name: str
    email: str
    role: str = "customer"

    class Config:
        extra = "allow"

class SessionData(BaseModel):
    user: User
    token: str
    expires: datetime

class UserSignup(BaseModel):
    name: str
    email: EmailStr
    password: str

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class AuthPayload(BaseModel):
    user: User
    token: str

class LoginResult(BaseModel):
    user: User
    redirect_to: str
