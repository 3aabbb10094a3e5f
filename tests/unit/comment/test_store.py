"""Tests for MongoCommentStore queries and error translation."""

import pytest
from conftest import AUTHOR_ID, POST_ID, POST_OWNER_ID, STRANGER_ID, cid, make_comment
from pymongo.errors import AutoReconnect, ServerSelectionTimeoutError, WriteError
from pymongo.results import DeleteResult

from threadboard.core.modules.comment.store import MongoCommentStore
from threadboard.errors import StoreUnavailableError, ValidationError

OTHER_POST_ID = cid(500)


def matches(doc, query):
    """Equality and `$in` matching, enough for the queries the store sends."""
    for key, condition in query.items():
        value = doc.get(key)
        if isinstance(condition, dict) and "$in" in condition:
            if value not in condition["$in"]:
                return False
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def sort(self, *args, **kwargs):
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc


class FakeCollection:
    """Collection stand-in over a list of documents.

    `error` is raised by every call, or only by the calls named in `fail_on`.
    """

    def __init__(self, docs=None, error=None, fail_on=None):
        self.docs = docs or []
        self.error = error
        self.fail_on = fail_on
        self.inserted = []

    def _check(self, name):
        if self.error and (self.fail_on is None or name in self.fail_on):
            raise self.error

    def find(self, query, projection=None):
        self._check("find")
        return FakeCursor([d for d in self.docs if matches(d, query)])

    async def find_one(self, query, projection=None):
        self._check("find_one")
        return next((d for d in self.docs if matches(d, query)), None)

    async def count_documents(self, query, limit=0):
        self._check("count_documents")
        count = sum(1 for d in self.docs if matches(d, query))
        return min(count, limit) if limit else count

    async def insert_one(self, doc):
        self._check("insert_one")
        self.inserted.append(doc)
        self.docs.append(doc)

    async def delete_one(self, query):
        self._check("delete_one")
        for index, doc in enumerate(self.docs):
            if matches(doc, query):
                del self.docs[index]
                return DeleteResult({"n": 1}, acknowledged=True)
        return DeleteResult({"n": 0}, acknowledged=True)

    async def delete_many(self, query):
        self._check("delete_many")
        before = len(self.docs)
        self.docs = [d for d in self.docs if not matches(d, query)]
        return DeleteResult({"n": before - len(self.docs)}, acknowledged=True)

    async def find_one_and_update(self, query, update, return_document=None):
        self._check("find_one_and_update")
        doc = next((d for d in self.docs if matches(d, query)), None)
        if doc is not None:
            doc.update(update["$set"])
        return doc


def stored_thread():
    """Root 1 by AUTHOR, reply 2 by STRANGER, reply 3 under 2, separate root 4 by STRANGER, one comment on another post."""
    other = make_comment(5, user_id=STRANGER_ID).to_mongo()
    other["post_id"] = OTHER_POST_ID
    return [
        make_comment(1).to_mongo(),
        make_comment(2, parent=1, user_id=STRANGER_ID).to_mongo(),
        make_comment(3, parent=2).to_mongo(),
        make_comment(4, user_id=STRANGER_ID).to_mongo(),
        other,
    ]


def make_store(comments):
    posts = FakeCollection([{"_id": POST_ID, "user_id": POST_OWNER_ID}])
    return MongoCommentStore(comments, posts)


def remaining_ids(collection):
    return [doc["_id"] for doc in collection.docs]


@pytest.mark.asyncio
class TestListAndInsert:
    """Tests for reading and adding comments."""

    async def test_list_by_post(self):
        comments = FakeCollection(stored_thread())
        store = make_store(comments)
        listed = await store.list_by_post(POST_ID)
        assert [c.id for c in listed] == [cid(1), cid(2), cid(3), cid(4)]

    async def test_unreachable_store_on_list(self):
        store = make_store(FakeCollection(error=ServerSelectionTimeoutError("no servers")))
        with pytest.raises(StoreUnavailableError):
            await store.list_by_post(POST_ID)

    async def test_rejected_insert(self):
        store = make_store(FakeCollection(error=WriteError("validation failed", code=121)))
        with pytest.raises(ValidationError, match="rejected"):
            await store.insert("hello", POST_ID, POST_OWNER_ID, None)

    async def test_insert_assigns_id_and_timestamp(self):
        comments = FakeCollection()
        store = make_store(comments)
        comment = await store.insert("hello", POST_ID, POST_OWNER_ID, None)

        assert comment.created_at is not None
        assert comments.inserted[0]["_id"] == comment.id

    async def test_parent_from_other_post_rejected(self):
        comments = FakeCollection(stored_thread())
        store = make_store(comments)

        with pytest.raises(ValidationError, match="does not belong"):
            await store.insert("hello", POST_ID, POST_OWNER_ID, cid(5))
        assert comments.inserted == []


@pytest.mark.asyncio
class TestDelete:
    """Tests for identity-scoped deletes and the reply cascade."""

    async def test_author_deletes_with_replies(self):
        comments = FakeCollection(stored_thread())
        removed = await make_store(comments).delete(cid(1), AUTHOR_ID)

        assert removed == [cid(1), cid(2), cid(3)]
        assert remaining_ids(comments) == [cid(4), cid(5)]

    async def test_post_author_moderates(self):
        comments = FakeCollection(stored_thread())
        removed = await make_store(comments).delete(cid(4), POST_OWNER_ID)

        assert removed == [cid(4)]
        assert cid(4) not in remaining_ids(comments)

    async def test_post_author_cannot_moderate_other_posts(self):
        comments = FakeCollection(stored_thread())
        assert await make_store(comments).delete(cid(5), POST_OWNER_ID) == []
        assert cid(5) in remaining_ids(comments)

    async def test_stranger_matches_nothing(self):
        comments = FakeCollection(stored_thread())
        assert await make_store(comments).delete(cid(1), STRANGER_ID) == []
        assert len(comments.docs) == 5

    async def test_missing_comment(self):
        comments = FakeCollection(stored_thread())
        assert await make_store(comments).delete(cid(999), AUTHOR_ID) == []

    async def test_failed_reply_lookup_deletes_nothing(self):
        """Test losing the connection while collecting replies leaves the thread whole."""
        comments = FakeCollection(stored_thread(), error=AutoReconnect("connection reset"), fail_on={"find"})
        with pytest.raises(StoreUnavailableError):
            await make_store(comments).delete(cid(1), AUTHOR_ID)
        assert len(comments.docs) == 5

    async def test_interrupted_delete_leaves_no_orphans(self):
        """Test replies are removed before their root, so a failure on the root keeps it alone."""
        comments = FakeCollection(stored_thread(), error=AutoReconnect("connection reset"), fail_on={"delete_one"})
        with pytest.raises(StoreUnavailableError):
            await make_store(comments).delete(cid(1), AUTHOR_ID)

        assert remaining_ids(comments) == [cid(1), cid(4), cid(5)]
        parents = {doc["parent_id"] for doc in comments.docs} - {None}
        assert parents <= set(remaining_ids(comments))

    async def test_delete_by_post(self):
        comments = FakeCollection(stored_thread())
        assert await make_store(comments).delete_by_post(POST_ID) == 4
        assert remaining_ids(comments) == [cid(5)]


@pytest.mark.asyncio
class TestUpdateContent:
    """Tests for editing comment text."""

    async def test_author_updates(self):
        comments = FakeCollection(stored_thread())
        updated = await make_store(comments).update_content(cid(1), AUTHOR_ID, "Revised")

        assert updated is not None
        assert updated.content == "Revised"
        assert updated.edited_at is not None

    async def test_other_user_matches_nothing(self):
        comments = FakeCollection(stored_thread())
        assert await make_store(comments).update_content(cid(1), POST_OWNER_ID, "Moderated") is None
        assert comments.docs[0]["content"] == "comment 1"
