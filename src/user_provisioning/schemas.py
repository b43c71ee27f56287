# src/user_provisioning/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from user_provisioning.database.models import Role


class UserCreateRequest(BaseModel):
    """POST /users 요청 본문"""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=2, max_length=50, pattern=r"^[a-zA-Z]+$")
    email: EmailStr
    password: str = Field(min_length=8)
    role: Optional[Role] = Role.USER
