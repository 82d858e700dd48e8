"""
Inkwell Backend: Post Service Unit Tests
==========================================

What:  PostService behavior against a mocked AsyncSession.
How:   Query results are mocked; the statement handed to session.execute()
       is compiled with the PostgreSQL dialect to check its shape (filter,
       ordering, SET clause). One statement per operation.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from inkwell.exceptions import ValidationError
from inkwell.schemas.post import SortOptions
from inkwell.services.post_service import PostService, parse_post_id


def compiled(session):
    """SQL text and bound params of the single statement the service executed."""
    assert session.execute.await_count == 1
    stmt = session.execute.call_args.args[0]
    sql = stmt.compile(dialect=postgresql.dialect())
    return " ".join(str(sql).split()), sql.params


def rows(session, posts):
    result = MagicMock()
    result.scalars.return_value.all.return_value = posts
    session.execute.return_value = result


def one(session, post):
    result = MagicMock()
    result.scalar_one_or_none.return_value = post
    session.execute.return_value = result


class TestCreatePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_create_with_all_fields(self, assign_store_defaults, sample_post_data):
        session = assign_store_defaults

        created = await self.service.create_post(session, sample_post_data)

        session.add.assert_called_once()
        session.flush.assert_awaited_once()
        session.refresh.assert_not_awaited()
        session.execute.assert_not_awaited()
        added = session.add.call_args.args[0]
        assert added.title == sample_post_data["title"]
        assert added.tags == ["sqlalchemy", "postgres"]
        assert created.id == added.id
        assert created.author == "Daniel Bugl"
        assert created.created_at is not None
        assert created.updated_at is not None

    @pytest.mark.asyncio
    async def test_create_with_title_only(self, assign_store_defaults):
        created = await self.service.create_post(assign_store_defaults, {"title": "Only a title"})

        assert created.id is not None
        assert created.author is None
        assert created.contents is None
        assert created.tags == []

    @pytest.mark.asyncio
    async def test_create_without_title_fails_before_touching_store(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_post(
                mock_db_session,
                {"author": "Daniel Bugl", "contents": "Post with no title", "tags": ["empty"]},
            )

        assert "`title` is required" in exc_info.value.message
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_errors_propagate_unchanged(self, mock_db_session):
        error = OperationalError("INSERT", {}, Exception("connection reset"))
        mock_db_session.flush.side_effect = error

        with pytest.raises(OperationalError) as exc_info:
            await self.service.create_post(mock_db_session, {"title": "t"})
        assert exc_info.value is error


class TestListPosts:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_returns_every_row_from_the_store(self, mock_db_session, make_post):
        posts = [make_post(title=f"Post {i}", minutes=i) for i in range(4)]
        rows(mock_db_session, posts)

        result = await self.service.list_all_posts(mock_db_session)

        assert [p.id for p in result] == [p.id for p in posts]
        sql, _ = compiled(mock_db_session)
        assert "WHERE" not in sql
        assert "LIMIT" not in sql

    @pytest.mark.asyncio
    async def test_default_order_is_created_at_descending(self, mock_db_session):
        rows(mock_db_session, [])

        await self.service.list_all_posts(mock_db_session)

        sql, _ = compiled(mock_db_session)
        assert sql.endswith("ORDER BY posts.created_at DESC")

    @pytest.mark.asyncio
    async def test_sort_options_from_query_values(self, mock_db_session):
        rows(mock_db_session, [])

        await self.service.list_all_posts(
            mock_db_session, {"sortBy": "updatedAt", "sortOrder": "ascending"}
        )

        sql, _ = compiled(mock_db_session)
        assert sql.endswith("ORDER BY posts.updated_at ASC")

    @pytest.mark.asyncio
    async def test_sort_options_model(self, mock_db_session):
        rows(mock_db_session, [])

        await self.service.list_all_posts(mock_db_session, SortOptions(sortBy="title", sortOrder="asc"))

        sql, _ = compiled(mock_db_session)
        assert sql.endswith("ORDER BY posts.title ASC")

    @pytest.mark.asyncio
    async def test_invalid_sort_options_raise(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.list_all_posts(mock_db_session, {"sortBy": "password"})
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_filter_by_author_is_exact_match(self, mock_db_session, make_post):
        rows(mock_db_session, [make_post(author="Daniel Bugl")])

        result = await self.service.list_posts_by_author(mock_db_session, "Daniel Bugl")

        assert len(result) == 1
        sql, params = compiled(mock_db_session)
        assert "WHERE posts.author = %(author_1)s" in sql
        assert params["author_1"] == "Daniel Bugl"
        assert "ORDER BY posts.created_at DESC" in sql

    @pytest.mark.asyncio
    async def test_filter_by_tag_is_membership(self, mock_db_session, make_post):
        rows(mock_db_session, [make_post(tags=["react", "nodejs"])])

        result = await self.service.list_posts_by_tag(
            mock_db_session, "nodejs", {"sortOrder": "ascending"}
        )

        assert result[0].tags == ["react", "nodejs"]
        sql, params = compiled(mock_db_session)
        assert "posts.tags @>" in sql
        assert ["nodejs"] in params.values()
        assert sql.endswith("ORDER BY posts.created_at ASC")


class TestGetPost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_returns_full_post(self, mock_db_session, make_post):
        post = make_post(title="Learn React Hooks", author="Daniel Bugl", tags=["react"])
        one(mock_db_session, post)

        result = await self.service.get_post_by_id(mock_db_session, str(post.id))

        assert result.id == post.id
        assert result.title == "Learn React Hooks"
        assert result.created_at == post.created_at
        sql, params = compiled(mock_db_session)
        assert "WHERE posts.id = " in sql
        assert post.id in params.values()

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, mock_db_session):
        one(mock_db_session, None)

        assert await self.service.get_post_by_id(mock_db_session, uuid4()) is None

    @pytest.mark.asyncio
    async def test_malformed_id_is_a_validation_error(self, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.get_post_by_id(mock_db_session, "0000000000000000000000")
        assert exc_info.value.field == "id"
        mock_db_session.execute.assert_not_awaited()


class TestUpdatePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    async def test_returns_post_after_update(self, mock_db_session, make_post):
        post = make_post(title="New title", author="Daniel Bugl")
        one(mock_db_session, post)

        result = await self.service.update_post(mock_db_session, post.id, {"title": "New title"})

        assert result.title == "New title"
        sql, _ = compiled(mock_db_session)
        assert sql.startswith("UPDATE posts SET")
        assert "RETURNING" in sql

    @pytest.mark.asyncio
    async def test_only_supplied_fields_are_written(self, mock_db_session, make_post):
        one(mock_db_session, make_post())

        await self.service.update_post(mock_db_session, uuid4(), {"contents": "updated"})

        sql, params = compiled(mock_db_session)
        set_clause = sql.split(" WHERE ")[0]
        assert "contents=" in set_clause
        assert "updated_at=" in set_clause
        assert "title=" not in set_clause
        assert "created_at=" not in set_clause
        assert params["contents"] == "updated"

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, mock_db_session):
        one(mock_db_session, None)

        result = await self.service.update_post(mock_db_session, uuid4(), {"title": "x"})

        assert result is None
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_fields_raise(self, mock_db_session):
        with pytest.raises(ValidationError, match="`title` is required"):
            await self.service.update_post(mock_db_session, uuid4(), {"title": ""})
        mock_db_session.execute.assert_not_awaited()


class TestDeletePost:

    def setup_method(self):
        self.service = PostService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rowcount", [0, 1])
    async def test_reports_removed_count(self, mock_db_session, rowcount):
        result = MagicMock()
        result.rowcount = rowcount
        mock_db_session.execute.return_value = result

        outcome = await self.service.delete_post(mock_db_session, str(uuid4()))

        assert outcome.deleted_count == rowcount
        sql, _ = compiled(mock_db_session)
        assert sql.startswith("DELETE FROM posts WHERE posts.id = ")

    @pytest.mark.asyncio
    async def test_malformed_id_is_a_validation_error(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.delete_post(mock_db_session, "not-an-id")


class TestParsePostId:

    def test_accepts_uuid_and_string(self):
        pid = uuid4()
        assert parse_post_id(pid) is pid
        assert parse_post_id(str(pid)) == pid

    @pytest.mark.parametrize("value", ["", "abc", "12345", None, 42])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValidationError):
            parse_post_id(value)
