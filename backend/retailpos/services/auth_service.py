# Overview: Service-layer operations for registration, login and admin provisioning.

"""
Authentication and Registration Service

WHY: Every action must be attributable. Uses bcrypt for password hashing
and signed tokens for sessions.

REGISTRATION RULES:
- email, password, role, first_name, last_name, phone_number are required
- ADMIN can never self-register (only create_admin / bootstrap_admin)
- Email is unique among non-deleted users
- OWNER registration creates the User and its Business in ONE transaction:
  both persist or neither does
- Other roles may name a store_id, which must reference an existing Store

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 10)
- Login failures are generic: never reveal whether email or password was wrong
- Results never include the password hash (User.to_dict omits it)
"""

from __future__ import annotations

import bcrypt

from ..authorization import Action, Actor, Role, SELF_REGISTERABLE_ROLES, parse_role, require
from ..errors import ConflictError, InvalidCredentialsError, PermissionDeniedError, ValidationError
from ..models import Business, Store, User
from ..validation import clean_str, normalize_email, optional_int, require_fields


MIN_PASSWORD_LENGTH = 6

REGISTRATION_REQUIRED_FIELDS = ("email", "password", "role", "first_name", "last_name", "phone_number")
ADMIN_REQUIRED_FIELDS = ("email", "password", "first_name", "last_name", "phone_number")

# Used when the email is unknown so login takes the same time either way
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=4)).decode("utf-8")


def validate_password(password) -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    return password


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash password using bcrypt with the given cost factor."""
    validate_password(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw() compares in constant time.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


class AuthService:
    def __init__(self, store, tokens, *, bcrypt_rounds: int = 10):
        self.store = store
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    # -- lookups -----------------------------------------------------------

    def find_active_by_email(self, email: str) -> User | None:
        return self.store.find_one(User, User.deleted_at.is_(None), email=email)

    def _ensure_email_available(self, email: str) -> None:
        if self.find_active_by_email(email) is not None:
            raise ConflictError("Email already in use")

    # -- registration ------------------------------------------------------

    def register(self, fields: dict) -> tuple[User, Business | None]:
        """
        Public self-registration.

        Returns (user, business); business is None unless role is OWNER.

        Raises:
            ValidationError: missing fields, bad role, missing business_name, invalid store_id
            PermissionDeniedError: role ADMIN
            ConflictError: email already used by a non-deleted user
        """
        require_fields(fields, REGISTRATION_REQUIRED_FIELDS)

        role = parse_role(fields.get("role"))
        if role is None:
            raise ValidationError("Invalid role")
        if role is Role.ADMIN or role not in SELF_REGISTERABLE_ROLES:
            raise PermissionDeniedError("You are not authorized to register as an ADMIN.")

        email = normalize_email(fields.get("email"))
        password_hash = hash_password(fields.get("password"), self.bcrypt_rounds)
        profile = self._profile_fields(fields)

        if role is Role.OWNER:
            business_name = clean_str(fields.get("business_name"), "business_name", max_length=255)
            if not business_name:
                raise ValidationError("Business name is required for owner registration")

            with self.store.transaction():
                self._ensure_email_available(email)
                user = self.store.create(
                    User,
                    email=email,
                    password_hash=password_hash,
                    role=role.value,
                    **profile,
                )
                business = self._create_business(user, fields, business_name)
            return user, business

        store_id = optional_int(fields.get("store_id"), "store_id")
        if store_id is not None and self.store.get(Store, store_id) is None:
            raise ValidationError("Invalid storeId")

        with self.store.transaction():
            self._ensure_email_available(email)
            user = self.store.create(
                User,
                email=email,
                password_hash=password_hash,
                role=role.value,
                store_id=store_id,
                **profile,
            )
        return user, None

    def _create_business(self, owner: User, fields: dict, business_name: str) -> Business:
        return self.store.create(
            Business,
            name=business_name,
            address=clean_str(fields.get("address"), "address", max_length=255),
            registration_number=clean_str(fields.get("registration_number"), "registration_number", max_length=64),
            owner_id=owner.id,
        )

    def _profile_fields(self, fields: dict) -> dict:
        return {
            "first_name": clean_str(fields.get("first_name"), "first_name", max_length=120),
            "last_name": clean_str(fields.get("last_name"), "last_name", max_length=120),
            "phone_number": clean_str(fields.get("phone_number"), "phone_number", max_length=32),
        }

    # -- login -------------------------------------------------------------

    def login(self, email, password) -> tuple[str, User]:
        """
        Authenticate and issue a signed token.

        Absent user and wrong password raise the same InvalidCredentialsError.
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError("email and password required")

        user = self.find_active_by_email(email.strip().lower())
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        return self.tokens.issue_token(user), user

    # -- admin provisioning ------------------------------------------------

    def create_admin(self, actor: Actor, fields: dict) -> User:
        """Privileged admin creation path; only an ADMIN may call it."""
        require(actor, Action.MANAGE_ADMINS, message="Admin access required")
        require_fields(fields, ADMIN_REQUIRED_FIELDS)

        email = normalize_email(fields.get("email"))
        password_hash = hash_password(fields.get("password"), self.bcrypt_rounds)

        with self.store.transaction():
            self._ensure_email_available(email)
            return self.store.create(
                User,
                email=email,
                password_hash=password_hash,
                role=Role.ADMIN.value,
                **self._profile_fields(fields),
            )

    def bootstrap_admin(self, email: str, password: str) -> tuple[User, bool]:
        """
        Create the first admin if none exists.

        Returns (admin, created). Idempotent: an existing active admin is
        returned untouched.
        """
        existing = self.store.find_one(User, User.deleted_at.is_(None), role=Role.ADMIN.value)
        if existing is not None:
            return existing, False

        email = normalize_email(email)
        password_hash = hash_password(password, self.bcrypt_rounds)

        with self.store.transaction():
            self._ensure_email_available(email)
            admin = self.store.create(
                User,
                email=email,
                password_hash=password_hash,
                role=Role.ADMIN.value,
            )
        return admin, True
