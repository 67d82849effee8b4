"""
Authentication service: registration, login and token verification.

Passwords are hashed with Argon2 (argon2-cffi). The default cost
parameters put a single verification around 100ms on commodity hardware,
which slows down brute forcing at the price of login latency.
"""

from typing import Any, Dict, List, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from locshare.auth_service.utils import TOKEN_EXPIRATION_MINUTES, create_token, decode_token
from locshare.errors import NotFoundError, UnauthorizedError, ValidationError


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_email(email: Any) -> str:
    return _clean(email).lower()


class AuthService:
    """
    Registers users, checks credentials and issues/verifies bearer tokens.

    Args:
        users: Credential store (see `locshare.database.stores.UserStore`).
        secret (str): Token signing secret.
        expires_minutes (int): Token lifetime.
        hasher (PasswordHasher): Override for the Argon2 parameters.
    """

    def __init__(self, users, secret: str,
                 expires_minutes: int = TOKEN_EXPIRATION_MINUTES,
                 hasher: Optional[PasswordHasher] = None) -> None:
        if not secret:
            raise RuntimeError("JWT_SECRET is missing. Set it in .env")
        self.users = users
        self.secret = secret
        self.expires_minutes = expires_minutes
        self.hasher = hasher or PasswordHasher()

    def register(self, username: Any, email: Any, password: Any) -> Dict[str, Any]:
        """
        Create a user account.

        Returns:
            dict: The stored user without its password hash.

        Raises:
            ValidationError: A field is missing or empty.
            ConflictError: The email is already registered.
        """
        username = _clean(username)
        email = normalize_email(email)
        if not username or not email or not isinstance(password, str) or not password:
            raise ValidationError("All fields are required")

        pw_hash = self.hasher.hash(password)
        return self.users.create(username, email, pw_hash)

    def login(self, email: Any, password: Any) -> Dict[str, Any]:
        """
        Check credentials and issue a token.

        Returns:
            dict: {"token": str, "user": public user}

        Raises:
            ValidationError: Email or password missing.
            NotFoundError: No account for this email.
            UnauthorizedError: Password does not match.
        """
        email = normalize_email(email)
        if not email or not isinstance(password, str) or not password:
            raise ValidationError("Email and password are required")

        user = self.users.find_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        try:
            self.hasher.verify(user["passwordHash"], password)
        except (VerificationError, InvalidHashError):
            raise UnauthorizedError("Invalid email or password")

        public = {k: v for k, v in user.items() if k != "passwordHash"}
        token = create_token(public["id"], public["email"], self.secret, self.expires_minutes)
        return {"token": token, "user": public}

    def verify_token(self, token: Optional[str]) -> Dict[str, str]:
        return decode_token(token, self.secret)

    def get_user(self, user_id: str) -> Dict[str, Any]:
        # The account may have disappeared since the token was issued.
        user = self.users.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self) -> List[Dict[str, Any]]:
        return self.users.list_all()
