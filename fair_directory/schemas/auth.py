"""Authentication schemas for bearer token validation."""
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """
    JWT token payload with standard and custom claims.

    Tokens are issued by the session layer. Only the subject and role
    claims are used for authorization decisions here.
    """

    sub: str = Field(..., description="Subject (user ID)")
    iss: str = Field(..., description="Issuer")
    aud: Union[str, List[str]] = Field(..., description="Audience")
    exp: int = Field(..., description="Expiration time (Unix timestamp)")
    iat: int = Field(..., description="Issued at time (Unix timestamp)")
    role: str = Field("USER", description="Account role (custom claim)")
    email: Optional[str] = Field(None, description="User email address")
    name: Optional[str] = Field(None, description="User full name")


class AuthenticatedUser(BaseModel):
    """Authenticated caller extracted from a validated token."""

    user_id: str = Field(..., description="User ID from the token subject")
    role: str = Field(..., description="Account role")
    email: Optional[str] = None
    name: Optional[str] = None

    def is_admin(self, admin_role: str) -> bool:
        """Whether this caller holds the administrative role."""
        return self.role == admin_role
