"""Local accounts and the current session."""

from flowdoc.auth.account import Account
from flowdoc.auth.passwords import hash_password, verify_password
from flowdoc.auth.service import AuthService

__all__ = [
    "Account",
    "AuthService",
    "hash_password",
    "verify_password",
]
