import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.auth.models.user import User
from app.auth.schemas.user import ForumActivity, UserProfileResponse, UserProfileUpdate
from app.forum.models.discussion import Discussion
from app.forum.models.reply import Reply

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def _activity(self, user: User) -> ForumActivity:
        discussions_count = (
            self.db.query(func.count(Discussion.id))
            .filter(Discussion.author_id == user.id)
            .scalar()
        )
        replies_count, accepted_count = (
            self.db.query(
                func.count(Reply.id),
                func.count(Reply.id).filter(Reply.is_accepted_answer.is_(True)),
            )
            .filter(Reply.author_id == user.id)
            .one()
        )
        return ForumActivity(
            discussions_count=discussions_count or 0,
            replies_count=replies_count or 0,
            accepted_answers_count=accepted_count or 0,
        )

    def get_profile(self, user: User) -> UserProfileResponse:
        return UserProfileResponse(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            photo_url=user.photo_url,
            created_at=user.created_at,
            activity=self._activity(user),
        )

    def update_profile(self, user: User, data: UserProfileUpdate) -> UserProfileResponse:
        changes = data.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            user.name = changes["name"]
        if "photo_url" in changes:
            user.photo_url = changes["photo_url"] or None

        self.db.commit()
        self.db.refresh(user)
        logger.info("Profile updated", extra={"user_id": str(user.id), "fields": sorted(changes)})
        return self.get_profile(user)
