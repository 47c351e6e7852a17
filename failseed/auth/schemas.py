from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class RegisterRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=8)


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseSchema):
    id: UUID
    email: str
    created_at: datetime


class TokenResponse(BaseSchema):
    access_token: str
    user: UserOut
