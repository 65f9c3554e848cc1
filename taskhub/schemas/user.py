from pydantic import BaseModel, EmailStr, ConfigDict, Field


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str  # règles vérifiées après le contrôle du doublon d'email


class UserResponse(BaseModel):
    """Utilisateur tel que renvoyé par /api/users et dans les relations peuplées"""
    id: int = Field(alias="_id")
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginUser(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: str
    user: LoginUser


class MessageResponse(BaseModel):
    message: str
