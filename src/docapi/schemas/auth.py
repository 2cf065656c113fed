"""
Authentication response schema.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class LoginResult:
    """Token and user metadata returned by login/registration."""

    token: str
    token_type: str = "Bearer"
    user_id: Optional[str] = None
    username: Optional[str] = None
    privilege_set_id: Optional[str] = None
    privilege_set_name: Optional[str] = None
    tenant: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict, tenant: Optional[str] = None) -> "LoginResult":
        token = data.get("token") or data.get("accessToken")
        if not token:
            raise ValueError("Authentication response is missing token")
        return cls(
            token=token,
            token_type=data.get("tokenType") or "Bearer",
            user_id=data.get("userId"),
            username=data.get("username"),
            privilege_set_id=data.get("privilegeSetId"),
            privilege_set_name=data.get("privilegeSetName"),
            tenant=data.get("tenantKey") or tenant,
        )
