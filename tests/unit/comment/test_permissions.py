"""Tests for comment ownership rules."""

from uuid import uuid4

import pytest

from threadboard.core.modules.comment.permissions import can_delete, can_edit, ensure_can_create
from threadboard.errors import AuthenticationError, ValidationError


class TestCanDelete:
    """Tests for who may delete a comment."""

    @pytest.fixture(autouse=True)
    def setup(self):
        self.comment_owner = uuid4()
        self.post_owner = uuid4()
        self.stranger = uuid4()

    def test_comment_author_can_delete(self):
        assert can_delete(self.comment_owner, self.comment_owner, self.post_owner) is True

    def test_post_author_can_delete(self):
        """Test the post author moderates comments under their post."""
        assert can_delete(self.post_owner, self.comment_owner, self.post_owner) is True

    def test_other_user_cannot_delete(self):
        assert can_delete(self.stranger, self.comment_owner, self.post_owner) is False

    def test_anonymous_cannot_delete(self):
        assert can_delete(None, self.comment_owner, self.post_owner) is False

    def test_owner_of_both(self):
        """Test comment owner equal to post owner."""
        assert can_delete(self.comment_owner, self.comment_owner, self.comment_owner) is True
        assert can_delete(self.stranger, self.comment_owner, self.comment_owner) is False
        assert can_delete(None, self.comment_owner, self.comment_owner) is False


class TestCanEdit:
    """Tests for who may edit."""

    def test_only_author(self):
        author = uuid4()
        assert can_edit(author, author) is True
        assert can_edit(uuid4(), author) is False
        assert can_edit(None, author) is False


class TestEnsureCanCreate:
    """Tests for the checks made before creating a comment."""

    def test_valid(self):
        ensure_can_create(uuid4(), "Nice post")

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_rejected(self, content):
        with pytest.raises(ValidationError, match="Please enter a comment"):
            ensure_can_create(uuid4(), content)

    def test_anonymous_rejected(self):
        with pytest.raises(AuthenticationError):
            ensure_can_create(None, "Nice post")
