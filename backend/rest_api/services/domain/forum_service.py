"""
Forum Domain Service.

Posts, comments and likes. Moderation lives in ForumModerationService and
poll tallies in PollService; this service composes them into the
viewer-specific post representation served by the forum router.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import ForumCategory, Limits
from shared.config.logging import forum_logger as logger
from shared.infrastructure.db import transaction
from shared.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PostNotFoundError,
    ValidationError,
)
from shared.utils.schemas import CommentOutput, PollOption, PostOutput
from rest_api.models import ForumComment, ForumPost, utc_now
from rest_api.repositories import (
    ForumCommentRepository,
    ForumLikeRepository,
    ForumPostRepository,
    PostFilters,
)
from rest_api.services.domain.poll_service import PollService, PollSnapshot

PollOptionInput = str | PollOption | dict[str, Any]


def parse_poll_end(value: str | None) -> datetime | None:
    """
    Parse an ISO 8601 poll end date. Blank or unparseable input means the
    poll never closes; naive values are taken as UTC.
    """
    if value is None or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Ignoring unparseable poll end date", value=value[:40])
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _check_length(value: str | None, field: str, maximum: int, required: bool = True) -> str | None:
    if value is None or not value.strip():
        if required:
            raise ValidationError(f"{field} is required")
        return None
    if len(value) > maximum:
        raise ValidationError(f"{field} must be at most {maximum} characters")
    return value


class ForumService:
    """Domain service for forum posts, comments and likes."""

    def __init__(self, db: Session):
        self._db = db
        self._posts = ForumPostRepository(db)
        self._comments = ForumCommentRepository(db)
        self._likes = ForumLikeRepository(db)
        self._polls = PollService(db)

    # =========================================================================
    # Posts
    # =========================================================================

    def create_post(
        self,
        author_id: str,
        content: str,
        category: str,
        title: str | None = None,
        tags: list[str] | None = None,
        images: list[str] | None = None,
        poll_question: str | None = None,
        poll_options: list[PollOptionInput] | None = None,
        poll_ends_at: str | None = None,
    ) -> ForumPost:
        content = _check_length(content, "Content", Limits.MAX_POST_CONTENT_LENGTH)
        title = _check_length(title, "Title", Limits.MAX_POST_TITLE_LENGTH, required=False)
        if category not in ForumCategory.ALL:
            raise ValidationError(f"Invalid forum category '{category}'", category=category)

        stored_options = None
        poll_end = None
        if poll_question or poll_options:
            stored_options = self._build_poll_options(poll_question, poll_options)
            poll_end = parse_poll_end(poll_ends_at)

        with transaction(self._db):
            post = self._posts.create(
                author_id=author_id,
                title=title,
                content=content,
                category=category,
                tags=list(tags or []),
                images=list(images or []),
                poll_question=poll_question.strip() if stored_options else None,
                poll_options=stored_options,
                poll_ends_at=poll_end,
            )

        self._db.refresh(post)
        logger.info(
            "Forum post created",
            post_id=post.id,
            author_id=author_id,
            category=category,
            has_poll=post.has_poll,
        )
        return post

    @staticmethod
    def _build_poll_options(question: str | None, options: list[PollOptionInput] | None) -> list[dict[str, str]]:
        """
        Normalize poll options to [{id, text}].

        Options with blank text are dropped. Client ids are kept as given;
        bare strings get "option_<index>". Blank or repeated ids are rejected.
        """
        if not question or not question.strip():
            raise ValidationError("A poll needs a question")

        pairs: list[tuple[str | None, str]] = []
        for option in options or []:
            if isinstance(option, str):
                option_id, text = None, option
            elif isinstance(option, PollOption):
                option_id, text = option.id, option.text
            else:
                option_id, text = option.get("id"), option.get("text") or ""
            if text.strip():
                pairs.append((option_id, text.strip()))

        if len(pairs) < Limits.MIN_POLL_OPTIONS:
            raise ValidationError(f"A poll needs at least {Limits.MIN_POLL_OPTIONS} options")
        if len(pairs) > Limits.MAX_POLL_OPTIONS:
            raise ValidationError(f"A poll can have at most {Limits.MAX_POLL_OPTIONS} options")

        stored = []
        for index, (option_id, text) in enumerate(pairs):
            if option_id is None:
                option_id = f"option_{index}"
            elif not str(option_id).strip():
                raise ValidationError("Poll option ids cannot be blank")
            stored.append({"id": str(option_id).strip(), "text": text})

        ids = [option["id"] for option in stored]
        if len(set(ids)) != len(ids):
            raise ValidationError("Poll option ids must be unique")
        return stored

    def update_post(
        self,
        post_id: str,
        user_id: str,
        content: str | None = None,
        title: str | None = None,
        tags: list[str] | None = None,
    ) -> ForumPost:
        """Author-only edit. Hidden or moderated posts cannot be edited."""
        post = self._visible_post(post_id, is_admin=False)
        if post.author_id != user_id:
            raise ForbiddenError("edit this post", post_id=post_id, user_id=user_id)

        changes: dict[str, Any] = {}
        if content is not None:
            changes["content"] = _check_length(content, "Content", Limits.MAX_POST_CONTENT_LENGTH)
        if title is not None:
            changes["title"] = _check_length(title, "Title", Limits.MAX_POST_TITLE_LENGTH, required=False)
        if tags is not None:
            changes["tags"] = list(tags)
        if not changes:
            raise ValidationError("Nothing to update", post_id=post_id)

        with transaction(self._db):
            self._posts.update(post, is_edited=True, edited_at=utc_now(), **changes)

        self._db.refresh(post)
        logger.info("Forum post updated", post_id=post_id, fields=sorted(changes))
        return post

    def _visible_post(self, post_id: str, is_admin: bool) -> ForumPost:
        """Non-admins get a 404 for hidden or moderated posts."""
        post = self._posts.find_by_id(post_id)
        if post is None or (not is_admin and not post.is_publicly_visible):
            raise PostNotFoundError(post_id)
        return post

    def get_post(self, post_id: str, viewer_id: str | None, is_admin: bool = False) -> PostOutput:
        """Fetch a post for display and count the view."""
        post = self._visible_post(post_id, is_admin)
        with transaction(self._db):
            self._posts.increment_views(post_id)
        self._db.refresh(post)

        liked = viewer_id is not None and self._likes.find_like(post_id, viewer_id) is not None
        snapshot = self._polls.snapshots_for([post]).get(post.id)
        return self.present(post, viewer_id, is_admin, liked=liked, snapshot=snapshot)

    def list_posts(
        self,
        viewer_id: str | None,
        is_admin: bool = False,
        category: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[PostOutput]:
        """Newest first; hidden and moderated posts only for admins."""
        if category is not None and category not in ForumCategory.ALL:
            raise ValidationError(f"Invalid forum category '{category}'", category=category)

        posts = list(
            self._posts.find_all(
                PostFilters(
                    category=category,
                    include_moderated=is_admin,
                    limit=limit,
                    offset=offset,
                )
            )
        )
        post_ids = [post.id for post in posts]
        liked = self._likes.liked_post_ids(post_ids, viewer_id) if viewer_id else set()
        snapshots = self._polls.snapshots_for(posts)

        return [
            self.present(post, viewer_id, is_admin, liked=post.id in liked, snapshot=snapshots.get(post.id))
            for post in posts
        ]

    @staticmethod
    def present(
        post: ForumPost,
        viewer_id: str | None,
        is_admin: bool = False,
        liked: bool = False,
        snapshot: PollSnapshot | None = None,
    ) -> PostOutput:
        """Post DTO with the poll shaped by the viewer's privacy rule."""
        output = PostOutput.model_validate(post)
        output.is_liked = liked
        if snapshot is not None:
            view = snapshot.view_for(viewer_id, is_admin=is_admin)
            output.poll_options = view["pollOptions"]
            output.user_votes = view["userVotes"]
            output.show_results = view["showResults"]
        return output

    # =========================================================================
    # Comments
    # =========================================================================

    def create_comment(
        self,
        post_id: str,
        user_id: str,
        content: str,
        parent_id: str | None = None,
    ) -> ForumComment:
        content = _check_length(content, "Comment", Limits.MAX_COMMENT_LENGTH)

        with transaction(self._db):
            post = self._posts.find_for_update(post_id)
            if post is None or not post.is_publicly_visible:
                raise PostNotFoundError(post_id)

            if parent_id is not None:
                parent = self._comments.find_by_id(parent_id)
                if parent is None or parent.post_id != post_id:
                    raise NotFoundError("Comment", parent_id)

            comment = self._comments.create(
                post_id=post_id,
                user_id=user_id,
                content=content,
                parent_id=parent_id,
            )
            post.comments_count = (post.comments_count or 0) + 1
            self._db.flush()

        self._db.refresh(comment)
        logger.info("Forum comment created", post_id=post_id, comment_id=comment.id, user_id=user_id)
        return comment

    def list_comments(self, post_id: str, is_admin: bool = False) -> list[CommentOutput]:
        self._visible_post(post_id, is_admin)
        return [CommentOutput.model_validate(c) for c in self._comments.find_for_post(post_id)]

    # =========================================================================
    # Likes
    # =========================================================================

    def toggle_like(self, post_id: str, user_id: str) -> tuple[bool, int, list[str]]:
        """
        Like or unlike a post.

        likes_count is resynchronised from the like rows inside the same
        transaction rather than incremented, so it self-heals after drift.

        Returns:
            (liked, likes_count, liked_by_user_ids)
        """
        try:
            with transaction(self._db):
                post = self._posts.find_for_update(post_id)
                if post is None or not post.is_publicly_visible:
                    raise PostNotFoundError(post_id)

                existing = self._likes.find_like(post_id, user_id)
                if existing is not None:
                    self._likes.delete(existing)
                    liked = False
                else:
                    self._likes.create(post_id=post_id, user_id=user_id)
                    liked = True

                likes_count = self._likes.count_for_post(post_id)
                post.likes_count = likes_count
                liked_by = self._likes.liked_by(post_id)
                self._db.flush()
        except IntegrityError:
            # Concurrent double-click from another tab won the insert
            raise ConflictError("Like is already being processed", post_id=post_id, user_id=user_id)

        logger.debug("Forum like toggled", post_id=post_id, user_id=user_id, liked=liked)
        return liked, likes_count, liked_by
