import logging
import re
from typing import Optional
from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DbSession
from recurate.core.exceptions import (
    ConflictError,
    HashingError,
    InvalidCredentialsError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from recurate.core.security import get_password_hash, pwd_context, verify_password
from recurate.models.user import User
from recurate.services.session_store import Session, SessionStore, session_store
from recurate.storage.local_storage import PROFILE_PHOTO_TYPES, LocalStorage, storage

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# ASCII only; \d would also accept other scripts' digits
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")

_REQUIRED_FIELDS = (
    ("full_name", "Full name"),
    ("email", "Email"),
    ("phone", "Phone number"),
    ("password", "Password"),
    ("confirm_password", "Password confirmation"),
)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Registration, login and logout on top of the user table and session store"""

    def __init__(self, sessions: SessionStore = session_store, files: LocalStorage = storage):
        self.sessions = sessions
        self.files = files

    def _start_session(self, user: User) -> Session:
        return self.sessions.create(
            user_id=user.id,
            display_name=user.full_name,
            is_admin=user.is_admin,
        )

    def register(
        self,
        db: DbSession,
        full_name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
        profile_photo: Optional[UploadFile] = None,
    ) -> Session:
        """
        Create an account and log it in.

        Checks run in a fixed order and stop at the first failure:
        presence, format, password match, email uniqueness, then hashing and
        insert. The photo is only written to disk once every check passed.
        """
        values = {
            "full_name": (full_name or "").strip(),
            "email": normalize_email(email),
            "phone": (phone or "").strip(),
            "password": password or "",
            "confirm_password": confirm_password or "",
        }
        for field, label in _REQUIRED_FIELDS:
            if not values[field]:
                raise ValidationError(f"{label} is required", field=field)

        if not EMAIL_PATTERN.match(values["email"]):
            raise ValidationError("Invalid email format", field="email")
        if not PHONE_PATTERN.match(values["phone"]):
            raise ValidationError("Phone number must be exactly 10 digits", field="phone")
        if self.files.has_file(profile_photo):
            self.files.resolve_media(profile_photo, PROFILE_PHOTO_TYPES)

        if values["password"] != values["confirm_password"]:
            raise ValidationError("Passwords do not match", field="confirm_password")

        try:
            # Explicit check gives a clean message; the unique index still
            # catches two registrations racing past it
            existing = db.query(User.id).filter(User.email == values["email"]).first()
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed during registration: {e}")
            raise StorageError() from e
        if existing:
            raise ConflictError("email already registered")

        stored_photo = self.files.save_upload(profile_photo, PROFILE_PHOTO_TYPES)
        photo_path = stored_photo.path if stored_photo else ""

        try:
            password_hash = get_password_hash(values["password"])
        except HashingError:
            self.files.delete_file(photo_path)
            raise

        user = User(
            full_name=values["full_name"],
            email=values["email"],
            phone=values["phone"],
            profile_photo=photo_path,
            password_hash=password_hash,
            is_admin=False,
        )
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError as e:
            db.rollback()
            self.files.delete_file(photo_path)
            logger.info(f"Registration lost uniqueness race for {values['email']}")
            raise ConflictError("email already registered") from e
        except SQLAlchemyError as e:
            db.rollback()
            self.files.delete_file(photo_path)
            logger.error(f"Could not insert user {values['email']}: {e}")
            raise StorageError() from e

        logger.info(f"Registered user {user.id} ({user.email})")
        return self._start_session(user)

    def login(self, db: DbSession, email: Optional[str], password: Optional[str]) -> Session:
        """
        Authenticate by email and password.

        Raises NotFoundError for an unknown email and InvalidCredentialsError
        for a wrong password; the HTTP layer shows both the same way.
        """
        email = normalize_email(email)
        try:
            user = db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as e:
            logger.error(f"User lookup failed during login: {e}")
            raise StorageError() from e

        if user is None:
            # Burn the same bcrypt cost so response time doesn't reveal the miss
            pwd_context.dummy_verify()
            logger.warning(f"Login failed for {email!r}: no such user")
            raise NotFoundError("User not found")

        if not verify_password(password or "", user.password_hash):
            logger.warning(f"Login failed for user {user.id}: wrong password")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return self._start_session(user)

    def logout(self, token: Optional[str]) -> None:
        """Destroy a session. Calling it with an unknown or empty token is fine"""
        session = self.sessions.get(token)
        self.sessions.destroy(token)
        if session is not None:
            logger.info(f"User {session.user_id} logged out")


auth_service = AuthService()
