from datetime import datetime
from uuid import uuid4

import asyncpg
import pytest

from blog_service.entities import SortOrder
from blog_service.errors import ValidationError
from blog_service.post_entities import PostCreate, PostListOptions, PostUpdate

MISSING_ID = "00000000-0000-0000-0000-000000000000"


class TestCreatingPosts:
    @pytest.mark.asyncio
    async def test_create_with_all_parameters(self, post_service, author):
        """All fields are stored and the store fills in id and timestamps."""
        fields = {
            "title": "Hello Postgres!",
            "contents": "This post is stored in PostgreSQL using asyncpg.",
            "tags": ["asyncpg", "postgres"],
        }
        created = await post_service.create_post(author.id, fields)

        assert created.id is not None
        assert isinstance(created.created_at, datetime)
        assert created.created_at == created.updated_at

        found = await post_service.get_post_by_id(created.id)
        assert found == created
        assert found.title == fields["title"]
        assert found.contents == fields["contents"]
        assert found.tags == fields["tags"]
        assert found.author == author.id

    @pytest.mark.asyncio
    async def test_create_with_minimal_parameters(self, post_service, author):
        created = await post_service.create_post(author.id, {"title": "Only a title"})

        assert created.contents is None
        assert created.tags == []

    @pytest.mark.asyncio
    async def test_create_accepts_model(self, post_service, author):
        created = await post_service.create_post(author.id, PostCreate(title="Typed"))
        assert created.title == "Typed"

    @pytest.mark.asyncio
    async def test_author_argument_overrides_inline_author(
        self, post_service, author, other_author
    ):
        created = await post_service.create_post(
            author.id, {"title": "Mine", "author": str(other_author.id)}
        )
        assert created.author == author.id

    @pytest.mark.asyncio
    async def test_inline_author_name_is_ignored(self, post_service, author):
        created = await post_service.create_post(
            author.id, {"title": "Learning Redux", "author": "Daniel Bugl"}
        )
        assert created.author == author.id

    @pytest.mark.asyncio
    async def test_null_tags_are_stored_empty(self, post_service, author):
        created = await post_service.create_post(author.id, {"title": "No tags", "tags": None})
        assert created.tags == []

    @pytest.mark.asyncio
    async def test_title_is_trimmed(self, post_service, author):
        created = await post_service.create_post(author.id, {"title": "  Spaced out  "})
        assert created.title == "Spaced out"

    @pytest.mark.asyncio
    async def test_duplicate_tags_are_kept_in_order(self, post_service, author):
        created = await post_service.create_post(
            author.id, {"title": "Tags", "tags": ["b", "a", "b"]}
        )
        found = await post_service.get_post_by_id(created.id)
        assert found.tags == ["b", "a", "b"]

    @pytest.mark.asyncio
    async def test_create_without_title_fails(self, post_service, author):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.create_post(
                author.id, {"contents": "Post with no title", "tags": ["empty"]}
            )

        assert exc_info.value.field == "title"
        assert exc_info.value.kind == "missing"
        assert await post_service.list_all_posts() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    async def test_create_with_blank_title_fails(self, post_service, author, title):
        with pytest.raises(ValidationError):
            await post_service.create_post(author.id, {"title": title})

        assert await post_service.list_all_posts() == []

    @pytest.mark.asyncio
    async def test_create_with_malformed_author_fails(self, post_service, test_db_pool):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.create_post("not-a-uuid", {"title": "Orphan"})

        assert exc_info.value.field == "author"
        assert exc_info.value.kind == "invalid"

    @pytest.mark.asyncio
    async def test_create_for_unknown_author_raises_store_error(
        self, post_service, test_db_pool
    ):
        with pytest.raises(asyncpg.ForeignKeyViolationError):
            await post_service.create_post(uuid4(), {"title": "Nobody wrote this"})


class TestGettingPosts:
    @pytest.mark.asyncio
    async def test_returns_the_full_post(self, post_service, sample_posts):
        post = await post_service.get_post_by_id(sample_posts[0].id)
        assert post == sample_posts[0]

    @pytest.mark.asyncio
    async def test_accepts_string_id(self, post_service, sample_posts):
        post = await post_service.get_post_by_id(str(sample_posts[0].id))
        assert post == sample_posts[0]

    @pytest.mark.asyncio
    async def test_missing_id_returns_none(self, post_service, sample_posts):
        assert await post_service.get_post_by_id(MISSING_ID) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("post_id", ["000000000000000000000000", "abc", ""])
    async def test_malformed_id_returns_none(self, post_service, sample_posts, post_id):
        assert await post_service.get_post_by_id(post_id) is None


class TestListingPosts:
    @pytest.mark.asyncio
    async def test_returns_all_posts(self, post_service, sample_posts):
        posts = await post_service.list_all_posts()
        assert len(posts) == len(sample_posts)

    @pytest.mark.asyncio
    async def test_sorted_by_creation_date_descending_by_default(
        self, post_service, sample_posts
    ):
        posts = await post_service.list_all_posts()
        timestamps = [p.created_at for p in posts]
        assert timestamps == sorted(timestamps, reverse=True)

    @pytest.mark.asyncio
    async def test_takes_sorting_options_into_account(self, post_service, sample_posts):
        posts = await post_service.list_all_posts(
            {"sortBy": "createdAt", "sortOrder": "ascending"}
        )
        timestamps = [p.created_at for p in posts]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_sorts_by_title(self, post_service, sample_posts):
        posts = await post_service.list_all_posts(
            PostListOptions(sort_by="title", sort_order=SortOrder.ASCENDING)
        )
        titles = [p.title for p in posts]
        assert titles == sorted(titles)

    @pytest.mark.asyncio
    async def test_unknown_sort_field_is_rejected(self, post_service, sample_posts):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.list_all_posts({"sortBy": "password"})
        assert exc_info.value.kind == "invalid"
        assert exc_info.value.field in ("sortBy", "sort_by")

    @pytest.mark.asyncio
    async def test_filters_by_tag(self, post_service, sample_posts):
        posts = await post_service.list_posts_by_tag("nodejs")

        assert len(posts) == 1
        assert posts[0].id == sample_posts[2].id

    @pytest.mark.asyncio
    async def test_tag_filter_returns_every_match_and_nothing_else(
        self, post_service, sample_posts
    ):
        posts = await post_service.list_posts_by_tag("react")

        assert {p.id for p in posts} == {sample_posts[1].id, sample_posts[2].id}
        assert all("react" in p.tags for p in posts)

    @pytest.mark.asyncio
    async def test_tag_filter_is_case_sensitive(self, post_service, sample_posts):
        assert await post_service.list_posts_by_tag("React") == []

    @pytest.mark.asyncio
    async def test_filters_by_author(self, post_service, author, sample_posts):
        posts = await post_service.list_posts_by_author(author.id)

        assert len(posts) == 3
        assert all(p.author == author.id for p in posts)
        timestamps = [p.created_at for p in posts]
        assert timestamps == sorted(timestamps, reverse=True)

    @pytest.mark.asyncio
    async def test_author_filter_with_malformed_id_is_empty(
        self, post_service, sample_posts
    ):
        assert await post_service.list_posts_by_author("Daniel Bugl") == []

    @pytest.mark.asyncio
    async def test_filters_by_author_username(self, post_service, other_author, sample_posts):
        posts = await post_service.list_posts_by_author_username("mei")

        assert [p.title for p in posts] == ["Guide to TypeScript"]
        assert posts[0].author == other_author.id

    @pytest.mark.asyncio
    async def test_unknown_username_lists_nothing(self, post_service, sample_posts):
        assert await post_service.list_posts_by_author_username("nobody") == []


class TestUpdatingPosts:
    @pytest.mark.asyncio
    async def test_updates_the_specified_property(self, post_service, author, sample_posts):
        updated = await post_service.update_post(
            sample_posts[0].id, author.id, {"contents": "Now with contents"}
        )
        assert updated.contents == "Now with contents"

        found = await post_service.get_post_by_id(sample_posts[0].id)
        assert found.contents == "Now with contents"

    @pytest.mark.asyncio
    async def test_does_not_update_other_properties(self, post_service, author, sample_posts):
        original = sample_posts[0]
        await post_service.update_post(original.id, author.id, {"tags": ["redux", "state"]})

        found = await post_service.get_post_by_id(original.id)
        assert found.tags == ["redux", "state"]
        assert found.title == original.title
        assert found.contents == original.contents
        assert found.author == original.author
        assert found.created_at == original.created_at

    @pytest.mark.asyncio
    async def test_updates_the_updated_at_timestamp(self, post_service, author, sample_posts):
        original = sample_posts[0]
        updated = await post_service.update_post(
            original.id, author.id, PostUpdate(title="Learning Redux Toolkit")
        )
        assert updated.updated_at > original.updated_at
        assert updated.created_at == original.created_at

    @pytest.mark.asyncio
    async def test_empty_patch_still_advances_updated_at(
        self, post_service, author, sample_posts
    ):
        original = sample_posts[0]
        first = await post_service.update_post(original.id, author.id, {})
        second = await post_service.update_post(original.id, author.id, {})

        assert first.updated_at > original.updated_at
        assert second.updated_at > first.updated_at
        assert second.model_dump(exclude={"updated_at"}) == original.model_dump(
            exclude={"updated_at"}
        )

    @pytest.mark.asyncio
    async def test_contents_can_be_cleared(self, post_service, author):
        post = await post_service.create_post(author.id, {"title": "T", "contents": "C"})
        updated = await post_service.update_post(post.id, author.id, {"contents": None})
        assert updated.contents is None

    @pytest.mark.asyncio
    async def test_missing_id_returns_none(self, post_service, author, sample_posts):
        assert await post_service.update_post(MISSING_ID, author.id, {"title": "X"}) is None

    @pytest.mark.asyncio
    async def test_malformed_id_returns_none(self, post_service, author, sample_posts):
        assert await post_service.update_post("nope", author.id, {"title": "X"}) is None

    @pytest.mark.asyncio
    async def test_other_author_cannot_update(
        self, post_service, other_author, sample_posts
    ):
        original = sample_posts[0]
        result = await post_service.update_post(original.id, other_author.id, {"title": "Hijacked"})

        assert result is None
        assert await post_service.get_post_by_id(original.id) == original

    @pytest.mark.asyncio
    async def test_blank_title_is_rejected(self, post_service, author, sample_posts):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.update_post(sample_posts[0].id, author.id, {"title": "  "})
        assert exc_info.value.field == "title"

    @pytest.mark.asyncio
    async def test_unknown_field_is_rejected(self, post_service, author, sample_posts):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.update_post(sample_posts[0].id, author.id, {"likes": 3})
        assert exc_info.value.field == "likes"
        assert exc_info.value.kind == "unknown"

    @pytest.mark.asyncio
    async def test_transfers_post_to_another_author(
        self, post_service, author, other_author, sample_posts
    ):
        post = sample_posts[0]
        updated = await post_service.update_post(post.id, author.id, {"author": str(other_author.id)})

        assert updated.author == other_author.id
        assert updated.title == post.title
        assert post.id in [p.id for p in await post_service.list_posts_by_author(other_author.id)]
        assert await post_service.update_post(post.id, author.id, {"title": "Mine again"}) is None

    @pytest.mark.asyncio
    async def test_other_author_cannot_claim_post(
        self, post_service, other_author, sample_posts
    ):
        post = sample_posts[0]
        result = await post_service.update_post(post.id, other_author.id, {"author": other_author.id})

        assert result is None
        assert (await post_service.get_post_by_id(post.id)).author == post.author

    @pytest.mark.asyncio
    async def test_author_cannot_be_cleared(self, post_service, author, sample_posts):
        with pytest.raises(ValidationError) as exc_info:
            await post_service.update_post(sample_posts[0].id, author.id, {"author": None})
        assert exc_info.value.field == "author"
        assert exc_info.value.kind == "missing"


class TestDeletingPosts:
    @pytest.mark.asyncio
    async def test_removes_the_post_from_the_database(
        self, post_service, author, sample_posts
    ):
        result = await post_service.delete_post(sample_posts[0].id, author.id)

        assert result.deleted_count == 1
        assert await post_service.get_post_by_id(sample_posts[0].id) is None
        assert len(await post_service.list_all_posts()) == len(sample_posts) - 1

    @pytest.mark.asyncio
    async def test_missing_id_deletes_nothing(self, post_service, author, sample_posts):
        result = await post_service.delete_post(MISSING_ID, author.id)
        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_malformed_id_deletes_nothing(self, post_service, author, sample_posts):
        result = await post_service.delete_post("000000000000000000000000", author.id)
        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_other_author_cannot_delete(self, post_service, other_author, sample_posts):
        result = await post_service.delete_post(sample_posts[0].id, other_author.id)

        assert result.deleted_count == 0
        assert await post_service.get_post_by_id(sample_posts[0].id) is not None

    @pytest.mark.asyncio
    async def test_second_delete_reports_zero(self, post_service, author, sample_posts):
        await post_service.delete_post(sample_posts[0].id, author.id)
        result = await post_service.delete_post(sample_posts[0].id, author.id)
        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_deleted_post_cannot_be_updated(self, post_service, author, sample_posts):
        await post_service.delete_post(sample_posts[0].id, author.id)
        assert await post_service.update_post(sample_posts[0].id, author.id, {"title": "Back"}) is None
