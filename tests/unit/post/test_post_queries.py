"""Tests for post search, slug helpers and store failures."""

import re

import pytest
from conftest import POST_ID
from pymongo.errors import AutoReconnect

from threadboard.core.modules.post.service import PostService, build_title_query
from threadboard.errors import StoreUnavailableError
from threadboard.utils import slugify


class TestBuildTitleQuery:
    """Tests for the title search filter."""

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_blank_matches_everything(self, query):
        assert build_title_query(query) == {}

    def test_case_insensitive_substring(self):
        assert build_title_query("Hello") == {"title": {"$regex": "Hello", "$options": "i"}}

    def test_special_characters_are_literal(self):
        """Test regex symbols in the search text are escaped."""
        query = build_title_query("c++ (draft)")
        pattern = query["title"]["$regex"]
        assert re.search(pattern, "my C++ (DRAFT) notes", re.IGNORECASE)
        assert not re.search(pattern, "cc (draft)", re.IGNORECASE)


class TestSlugify:
    """Tests for slugs derived from titles."""

    def test_basic(self):
        assert slugify("Hello World") == "hello-world"

    def test_symbols_dropped(self):
        assert slugify("What's new?  Part 2!") == "whats-new-part-2"


class FailingCollection:
    """Posts collection whose every call fails as if the server were down."""

    async def count_documents(self, *args, **kwargs):
        raise AutoReconnect("connection reset")

    async def find_one(self, *args, **kwargs):
        raise AutoReconnect("connection reset")


class FakeDatabase:
    def __init__(self, collection):
        self._collection = collection

    def get_collection(self, name):
        return self._collection


@pytest.mark.asyncio
class TestPostStoreFailures:
    """Tests for reporting an unreachable database on post reads."""

    async def test_list_posts(self):
        service = PostService(FakeDatabase(FailingCollection()))
        with pytest.raises(StoreUnavailableError):
            await service.list_posts("hello")

    async def test_get_post(self):
        service = PostService(FakeDatabase(FailingCollection()))
        with pytest.raises(StoreUnavailableError):
            await service.get_post(POST_ID)
