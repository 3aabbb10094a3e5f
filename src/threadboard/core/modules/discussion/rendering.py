"""Plain-text transcript of a discussion."""

from threadboard.core.modules.comment.tree import CommentTree

EMPTY_DISCUSSION = "No comments yet."


def render_discussion(tree: CommentTree, indent: str = "  ") -> str:
    """One line per comment, replies indented under the comment they answer."""
    if tree.is_empty:
        return EMPTY_DISCUSSION

    lines = []
    for depth, comment in tree.walk():
        timestamp = comment.created_at.strftime("%Y-%m-%d %H:%M")
        edited = " (edited)" if comment.edited_at else ""
        lines.append(f"{indent * depth}[{timestamp}] {comment.user_id}: {comment.content}{edited}")
    return "\n".join(lines)
