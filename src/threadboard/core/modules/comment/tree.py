"""Reconstruction of reply threads from the flat list of a post's comments.

The tree never embeds comment objects inside each other. It keeps every
comment once in `comments` and describes the shape with `children`, a
mapping from a comment ID to the ordered IDs of its direct replies, so the
whole structure is plain data that can be dumped and rebuilt.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from threadboard.core.modules.comment.models import Comment, CommentThread
from threadboard.errors import DataIntegrityError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CommentNode:
    """Handle on one comment of a tree, replies are resolved on access."""

    tree: "CommentTree"
    comment_id: UUID

    @property
    def comment(self) -> Comment:
        return self.tree.comments[self.comment_id]

    @property
    def children(self) -> list["CommentNode"]:
        return [CommentNode(self.tree, child_id) for child_id in self.tree.children.get(self.comment_id, [])]


class CommentTree(BaseModel):
    """Forest of comments for a single post."""

    comments: dict[UUID, Comment] = Field(default_factory=dict)
    children: dict[UUID, list[UUID]] = Field(default_factory=dict)
    roots: list[UUID] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.comments)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self.comments

    @property
    def is_empty(self) -> bool:
        return not self.comments

    def get(self, comment_id: UUID) -> Comment | None:
        return self.comments.get(comment_id)

    def node(self, comment_id: UUID) -> CommentNode:
        if comment_id not in self.comments:
            raise KeyError(comment_id)
        return CommentNode(self, comment_id)

    def root_nodes(self) -> list[CommentNode]:
        return [CommentNode(self, root_id) for root_id in self.roots]

    def children_of(self, comment_id: UUID) -> list[Comment]:
        """Direct replies of a comment, oldest first."""
        return [self.comments[child_id] for child_id in self.children.get(comment_id, [])]

    def walk(self) -> Iterator[tuple[int, Comment]]:
        """Yield (depth, comment) in display order: each comment followed by its replies."""
        stack = [(0, root_id) for root_id in reversed(self.roots)]
        while stack:
            depth, comment_id = stack.pop()
            yield depth, self.comments[comment_id]
            stack.extend((depth + 1, child_id) for child_id in reversed(self.children.get(comment_id, [])))

    def descendants(self, comment_id: UUID) -> list[UUID]:
        """IDs of all replies below a comment, at any depth."""
        result: list[UUID] = []
        seen = {comment_id}
        stack = list(self.children.get(comment_id, []))
        while stack:
            child_id = stack.pop()
            if child_id in seen:
                continue
            seen.add(child_id)
            result.append(child_id)
            stack.extend(self.children.get(child_id, []))
        return result

    def to_threads(self) -> list[CommentThread]:
        """Nested representation for serialization, built without recursion."""
        threads = {comment_id: CommentThread.from_domain(comment) for comment_id, comment in self.comments.items()}
        for parent_id, child_ids in self.children.items():
            threads[parent_id].replies = [threads[child_id] for child_id in child_ids]
        return [threads[root_id] for root_id in self.roots]


def build_comment_tree(comments: Sequence[Comment]) -> CommentTree:
    """Group a post's comments, ordered by created_at, into reply threads.

    Siblings keep their relative input order. A comment whose parent is not
    in the input is kept as a root so it stays visible.

    Raises:
        DataIntegrityError: On duplicate IDs, a comment replying to itself, or
            comments whose reply chain loops back instead of reaching a root
    """
    by_id: dict[UUID, Comment] = {}
    for comment in comments:
        if comment.id in by_id:
            raise DataIntegrityError(f"Comment '{comment.id}' appears more than once", [comment.id])
        by_id[comment.id] = comment

    children: dict[UUID, list[UUID]] = {}
    roots: list[UUID] = []
    for comment in comments:
        if comment.parent_id is None:
            roots.append(comment.id)
        elif comment.parent_id == comment.id:
            raise DataIntegrityError(f"Comment '{comment.id}' replies to itself", [comment.id])
        elif comment.parent_id not in by_id:
            logger.warning("orphan_comment_shown_as_root", comment_id=comment.id, parent_id=comment.parent_id)
            roots.append(comment.id)
        else:
            children.setdefault(comment.parent_id, []).append(comment.id)

    # Anything not reachable from a root hangs off a cycle
    visited: set[UUID] = set()
    stack = list(roots)
    while stack:
        comment_id = stack.pop()
        visited.add(comment_id)
        stack.extend(children.get(comment_id, []))

    unreachable = [comment.id for comment in comments if comment.id not in visited]
    if unreachable:
        logger.error("comment_cycle_detected", comment_ids=unreachable)
        raise DataIntegrityError(
            f"Reply chain of {len(unreachable)} comment(s) forms a cycle and cannot be displayed", unreachable
        )

    return CommentTree(comments=by_id, children=children, roots=roots)
