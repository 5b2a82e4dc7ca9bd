import logging
from dataclasses import dataclass
from typing import List
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession
from recurate.core.exceptions import StorageError
from recurate.models.post import Post
from recurate.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class UserSummary:
    id: int
    full_name: str
    email: str
    phone: str
    is_admin: bool
    post_count: int


@dataclass
class Dashboard:
    users: List[UserSummary]
    total_posts: int


def build_dashboard(db: DbSession) -> Dashboard:
    """Read-only overview of every account and its post count"""
    post_counts = (
        db.query(Post.owner_id, func.count(Post.id).label("post_count"))
        .group_by(Post.owner_id)
        .subquery()
    )
    try:
        rows = (
            db.query(User, func.coalesce(post_counts.c.post_count, 0))
            .outerjoin(post_counts, post_counts.c.owner_id == User.id)
            .order_by(User.id)
            .all()
        )
        total_posts = db.query(func.count(Post.id)).scalar() or 0
    except SQLAlchemyError as e:
        logger.error(f"Could not build admin dashboard: {e}")
        raise StorageError() from e

    users = [
        UserSummary(
            id=user.id,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
            is_admin=bool(user.is_admin),
            post_count=int(count),
        )
        for user, count in rows
    ]
    return Dashboard(users=users, total_posts=int(total_posts))
