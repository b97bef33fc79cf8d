"""Authentication schemas."""

from pydantic import BaseModel, Field


class AuthPrincipal(BaseModel):
    """Verified caller identity handed to the job and order services."""

    user_id: str = Field(min_length=1)
