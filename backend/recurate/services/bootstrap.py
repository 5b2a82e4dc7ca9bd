"""
Startup seeding of the admin account.

The seed credentials come from settings (ADMIN_EMAIL, ADMIN_PASSWORD, ...),
so a deployment overrides them through the environment or .env.
"""

import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession
from recurate.core.config import Settings, settings as default_settings
from recurate.core.exceptions import StorageError
from recurate.core.security import get_password_hash
from recurate.models.user import User
from recurate.services.auth_service import normalize_email

logger = logging.getLogger(__name__)


def ensure_admin(db: DbSession, settings: Settings = default_settings) -> Optional[User]:
    """
    Create the bootstrap admin if no admin exists yet.

    Returns the created user, or None when nothing was done. If the seed email
    already belongs to a regular account it is left alone.
    """
    email = normalize_email(settings.ADMIN_EMAIL)
    try:
        if db.query(User.id).filter(User.is_admin.is_(True)).first():
            return None

        if db.query(User.id).filter(User.email == email).first():
            logger.warning(f"Admin seed email {email} belongs to a regular user; no admin created")
            return None

        admin = User(
            full_name=settings.ADMIN_FULL_NAME,
            email=email,
            phone=settings.ADMIN_PHONE,
            profile_photo="",
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            is_admin=True,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Admin bootstrap failed: {e}")
        raise StorageError() from e

    logger.info(f"Bootstrap admin created ({email})")
    return admin
