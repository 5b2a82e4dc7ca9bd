import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from fastapi import UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DbSession
from recurate.core.exceptions import (
    ForbiddenError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)
from recurate.models.post import Post
from recurate.models.user import User
from recurate.services.session_store import Session
from recurate.storage.local_storage import IMAGE, POST_MEDIA_TYPES, LocalStorage, storage

logger = logging.getLogger(__name__)

# Largest id a SQLite INTEGER column can hold
_MAX_ROW_ID = 2 ** 63 - 1


@dataclass
class FeedItem:
    """A post joined with the display fields of its author"""

    id: int
    content: str
    image_path: Optional[str]
    video_path: Optional[str]
    owner_id: int
    created_at: datetime
    author_name: str
    author_photo: str


def _require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise UnauthenticatedError()
    return session


class PostService:
    """CRUD on posts. Only the owning user may read-for-edit, update or delete"""

    def __init__(self, files: LocalStorage = storage):
        self.files = files

    def create_post(
        self,
        db: DbSession,
        session: Optional[Session],
        content: Optional[str],
        media: Optional[UploadFile] = None,
    ) -> Post:
        session = _require_session(session)
        content = (content or "").strip()
        if not content and not self.files.has_file(media):
            raise ValidationError("Post must have text or media", field="content")

        stored = self.files.save_upload(media, POST_MEDIA_TYPES)
        post = Post(content=content, owner_id=session.user_id)
        if stored is not None:
            if stored.kind == IMAGE:
                post.image_path = stored.path
            else:
                post.video_path = stored.path

        try:
            db.add(post)
            db.commit()
            db.refresh(post)
        except SQLAlchemyError as e:
            db.rollback()
            self.files.delete_file(stored.path if stored else None)
            logger.error(f"Could not create post for user {session.user_id}: {e}")
            raise StorageError() from e

        logger.info(f"User {session.user_id} created post {post.id}")
        return post

    def list_feed(self, db: DbSession) -> List[FeedItem]:
        """All posts, newest first, with author name and photo"""
        try:
            rows = (
                db.query(Post, User.full_name, User.profile_photo)
                .join(User, Post.owner_id == User.id)
                .order_by(Post.created_at.desc(), Post.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Could not load feed: {e}")
            raise StorageError() from e

        return [
            FeedItem(
                id=post.id,
                content=post.content,
                image_path=post.image_path,
                video_path=post.video_path,
                owner_id=post.owner_id,
                created_at=post.created_at,
                author_name=full_name,
                author_photo=profile_photo or "",
            )
            for post, full_name, profile_photo in rows
        ]

    def _owned_post(self, db: DbSession, session: Optional[Session], post_id: int) -> Post:
        """
        Fetch a post by id and owner in a single query.

        A missing post and someone else's post both raise ForbiddenError, so
        callers cannot probe which ids exist.
        """
        session = _require_session(session)
        if not 0 < post_id <= _MAX_ROW_ID:
            logger.warning(f"User {session.user_id} asked for out-of-range post id {post_id}")
            raise ForbiddenError()
        try:
            post = db.query(Post).filter(
                Post.id == post_id,
                Post.owner_id == session.user_id
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Could not load post {post_id}: {e}")
            raise StorageError() from e

        if post is None:
            logger.warning(f"User {session.user_id} denied access to post {post_id}")
            raise ForbiddenError()
        return post

    def get_post_for_edit(self, db: DbSession, session: Optional[Session], post_id: int) -> Post:
        return self._owned_post(db, session, post_id)

    def update_post(
        self,
        db: DbSession,
        session: Optional[Session],
        post_id: int,
        new_content: Optional[str],
    ) -> Post:
        """Overwrite the text of an owned post; media fields stay as they are"""
        post = self._owned_post(db, session, post_id)
        new_content = (new_content or "").strip()
        if not new_content and not (post.image_path or post.video_path):
            raise ValidationError("Post must have text or media", field="content")

        post.content = new_content
        try:
            db.commit()
            db.refresh(post)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Could not update post {post_id}: {e}")
            raise StorageError() from e

        logger.info(f"User {post.owner_id} updated post {post.id}")
        return post

    def delete_post(self, db: DbSession, session: Optional[Session], post_id: int) -> None:
        post = self._owned_post(db, session, post_id)
        media_path = post.image_path or post.video_path
        owner_id = post.owner_id
        try:
            db.delete(post)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Could not delete post {post_id}: {e}")
            raise StorageError() from e

        # Only after the commit; a failed delete keeps its media
        self.files.delete_file(media_path)
        logger.info(f"User {owner_id} deleted post {post_id}")


post_service = PostService()
