from sqlalchemy import Boolean, Column, DateTime, Integer, String, false
from sqlalchemy.sql import func
from recurate.core.database import Base


class User(Base):
    """
    Registered account.

    Passwords are stored as bcrypt hashes only. Exactly one row is expected
    to carry is_admin, seeded at startup by the bootstrap step.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    # Unique constraint closes the race between concurrent registrations
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=False)
    # Public path of the stored photo, "" when none was uploaded
    profile_photo = Column(String, nullable=False, default="")
    password_hash = Column(String, nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} admin={self.is_admin}>"
