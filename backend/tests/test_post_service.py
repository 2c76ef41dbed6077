"""
Inkwell Backend: Post Service Unit Tests
========================================

What:  Tests for posts, comments and categories, including ownership rules
       and relation composition.
How:   Real PostService on an in-memory database with two registered users.

What we test:
    ✅ Created posts are owned by the caller
    ✅ Non-owners cannot update, delete or categorize a post (nothing written)
    ✅ Missing posts → NotFoundError for reads, writes, comments, categories
    ✅ Any user may comment on an existing post
    ✅ PostIncludes flags decide which relations are composed
    ✅ Deleting a post removes its comments and category links
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from app.exceptions import DatabaseError, ForbiddenError, NotFoundError
from app.models.category import Category, PostCategory
from app.models.comment import Comment
from app.models.post import Post
from app.schemas.post import (
    CategoryCreate,
    CommentCreate,
    PostCreate,
    PostIncludes,
    PostUpdate,
)
from app.services.auth_gate import Identity
from app.services.post_service import PostService
from app.services.user_service import UserService


async def _count(db_session, model) -> int:
    return await db_session.scalar(select(func.count()).select_from(model))


class PostServiceTestBase:

    def setup_method(self):
        self.service = PostService()
        self.users = UserService(bcrypt_rounds=4)

    async def _identities(self, db_session):
        ann = await self.users.register(db_session, "Ann", "ann@example.com", "secret123")
        bob = await self.users.register(db_session, "Bob", "bob@example.com", "secret123")
        return Identity.from_user(ann), Identity.from_user(bob)


class TestPostCrud(PostServiceTestBase):

    @pytest.mark.asyncio
    async def test_create_post_owned_by_caller(self, db_session):
        ann, _ = await self._identities(db_session)
        post = await self.service.create_post(
            db_session, ann, PostCreate(title="Hello", content="World")
        )
        assert post.id is not None
        assert post.user_id == ann.user_id

    @pytest.mark.asyncio
    async def test_owner_updates_post(self, db_session):
        ann, _ = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Draft"))

        updated = await self.service.update_post(
            db_session, ann, post.id, PostUpdate(content="Now with content")
        )

        assert updated.title == "Draft"
        assert updated.content == "Now with content"

    @pytest.mark.asyncio
    async def test_non_owner_update_forbidden_and_unchanged(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Mine"))

        with pytest.raises(ForbiddenError):
            await self.service.update_post(db_session, bob, post.id, PostUpdate(title="Yours"))

        stored = await self.service.get_post(db_session, post.id, PostIncludes.none())
        assert stored.title == "Mine"

    @pytest.mark.asyncio
    async def test_non_owner_delete_forbidden(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Mine"))

        with pytest.raises(ForbiddenError):
            await self.service.delete_post(db_session, bob, post.id)
        assert await _count(db_session, Post) == 1

    @pytest.mark.asyncio
    async def test_missing_post_not_found(self, db_session):
        ann, _ = await self._identities(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_post(db_session, 404)
        assert exc_info.value.message == "Post not found"

        with pytest.raises(NotFoundError):
            await self.service.update_post(db_session, ann, 404, PostUpdate(title="x"))
        with pytest.raises(NotFoundError):
            await self.service.delete_post(db_session, ann, 404)

    @pytest.mark.asyncio
    async def test_delete_cascades_comments_and_links(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Doomed"))
        await self.service.create_comment(db_session, bob, post.id, CommentCreate(content="Nice"))
        await self.service.create_category(db_session, ann, post.id, CategoryCreate(name="News"))

        await self.service.delete_post(db_session, ann, post.id)

        assert await _count(db_session, Post) == 0
        assert await _count(db_session, Comment) == 0
        assert await _count(db_session, PostCategory) == 0
        # The category itself is not owned by the post
        assert await _count(db_session, Category) == 1

    @pytest.mark.asyncio
    async def test_list_posts_ordered_with_all_relations(self, db_session):
        ann, bob = await self._identities(db_session)
        first = await self.service.create_post(db_session, ann, PostCreate(title="First"))
        second = await self.service.create_post(db_session, bob, PostCreate(title="Second"))
        await self.service.create_comment(db_session, bob, first.id, CommentCreate(content="Hi"))

        posts = await self.service.list_posts(db_session)

        assert [p.id for p in posts] == [first.id, second.id]
        assert posts[0].user.name == "Ann"
        assert [c.content for c in posts[0].comments] == ["Hi"]
        assert posts[1].comments == []
        assert posts[1].categories == []


class TestComments(PostServiceTestBase):

    @pytest.mark.asyncio
    async def test_any_user_may_comment(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Open"))

        comment = await self.service.create_comment(
            db_session, bob, post.id, CommentCreate(content="Great post")
        )

        assert comment.post_id == post.id
        assert comment.user_id == bob.user_id
        comments = await self.service.list_comments(db_session, post.id)
        assert [c.id for c in comments] == [comment.id]

    @pytest.mark.asyncio
    async def test_comment_on_missing_post(self, db_session):
        _, bob = await self._identities(db_session)
        with pytest.raises(NotFoundError):
            await self.service.create_comment(db_session, bob, 404, CommentCreate(content="?"))
        assert await _count(db_session, Comment) == 0

    @pytest.mark.asyncio
    async def test_list_comments_of_missing_post(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.list_comments(db_session, 404)


class TestCategories(PostServiceTestBase):

    @pytest.mark.asyncio
    async def test_owner_adds_category(self, db_session):
        ann, _ = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Tagged"))

        category = await self.service.create_category(
            db_session, ann, post.id, CategoryCreate(name="Python")
        )

        categories = await self.service.list_categories(db_session, post.id)
        assert [(c.id, c.name) for c in categories] == [(category.id, "Python")]

    @pytest.mark.asyncio
    async def test_non_owner_category_creates_nothing(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Mine"))

        with pytest.raises(ForbiddenError):
            await self.service.create_category(
                db_session, bob, post.id, CategoryCreate(name="Spam")
            )

        assert await _count(db_session, Category) == 0
        assert await _count(db_session, PostCategory) == 0

    @pytest.mark.asyncio
    async def test_category_on_missing_post(self, db_session):
        ann, _ = await self._identities(db_session)
        with pytest.raises(NotFoundError):
            await self.service.create_category(db_session, ann, 404, CategoryCreate(name="X"))
        assert await _count(db_session, Category) == 0


class TestPostIncludes(PostServiceTestBase):
    """Only requested relations are composed; the rest stay None."""

    async def _seeded_post(self, db_session):
        ann, bob = await self._identities(db_session)
        post = await self.service.create_post(db_session, ann, PostCreate(title="Full"))
        await self.service.create_comment(db_session, bob, post.id, CommentCreate(content="c1"))
        await self.service.create_category(db_session, ann, post.id, CategoryCreate(name="k1"))
        return post

    @pytest.mark.asyncio
    async def test_no_includes(self, db_session):
        post = await self._seeded_post(db_session)
        result = await self.service.get_post(db_session, post.id, PostIncludes.none())
        assert result.user is None
        assert result.categories is None
        assert result.comments is None

    @pytest.mark.asyncio
    async def test_comments_only(self, db_session):
        post = await self._seeded_post(db_session)
        result = await self.service.get_post(
            db_session, post.id, PostIncludes(with_comments=True)
        )
        assert [c.content for c in result.comments] == ["c1"]
        assert result.user is None
        assert result.categories is None

    @pytest.mark.asyncio
    async def test_all_includes(self, db_session):
        post = await self._seeded_post(db_session)
        result = await self.service.get_post(db_session, post.id, PostIncludes.all())
        assert result.user.email == "ann@example.com"
        assert [c.name for c in result.categories] == ["k1"]
        assert [c.content for c in result.comments] == ["c1"]


class TestPostServiceDatabaseErrors:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_list_posts_db_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")
        with pytest.raises(DatabaseError):
            await self.service.list_posts(mock_db_session)

    @pytest.mark.asyncio
    async def test_create_post_flush_error(self, mock_db_session):
        mock_db_session.flush.side_effect = SQLAlchemyError("disk full")
        identity = Identity(user_id=1, name="Ann", email="ann@example.com")
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_post(mock_db_session, identity, PostCreate(title="x"))
        assert exc_info.value.context["error_type"] == "SQLAlchemyError"
