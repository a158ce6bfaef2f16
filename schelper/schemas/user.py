from pydantic import BaseModel, ConfigDict, field_validator

class UserBase(BaseModel):
    username: str

class UserCreate(UserBase):
    password: str

    @field_validator("username")
    @classmethod
    def _username_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty")
        return v

class UserOut(UserBase):
    id: int
    role: str
    model_config = ConfigDict(from_attributes=True)

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
