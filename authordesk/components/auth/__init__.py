"""
Auth component - admin login and session tokens.
"""

from .component import run_create_admin, run_login, run_verify
from .models import AuthConfig, AuthOutput, CreateAdminInput, LoginInput, VerifyTokenInput
from .ports import AdminUserRepoPort, AuthAdapterPort, TimePort

__all__ = [
    "run_create_admin",
    "run_login",
    "run_verify",
    "AuthConfig",
    "AuthOutput",
    "CreateAdminInput",
    "LoginInput",
    "VerifyTokenInput",
    "AdminUserRepoPort",
    "AuthAdapterPort",
    "TimePort",
]
