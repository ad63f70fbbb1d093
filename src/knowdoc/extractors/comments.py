from functools import partial
from typing import List, Optional

from knowdoc.extractors.base import AddComment, Walker
from knowdoc.helpers import get_node_text
from knowdoc.models import Comment, SourceFile, SourceLocation
from knowdoc.syntax import (
    COMMENT_CATEGORIES,
    NodePath,
    SyntaxTree,
    comment_value,
    is_jsdoc_comment,
)


def walk_comments(
    category: str,
    include_context: bool,
    ast: SyntaxTree,
    source: SourceFile,
    add_comment: AddComment,
) -> List[Optional[Comment]]:
    """
    Report every JSDoc comment attached to a node as *category* ("leading",
    "inner" or "trailing"). Nodes are visited in pre-order, so a class is
    always seen before its members.
    """
    if category not in COMMENT_CATEGORIES:
        raise ValueError(f"Unknown comment category: {category}")

    results: List[Optional[Comment]] = []
    for node in ast.iter_nodes():
        comments = ast.comments(node, category)
        if not comments:
            continue
        path = NodePath(node)
        node_loc = SourceLocation.from_node(node)
        for comment in comments:
            text = get_node_text(comment)
            if not is_jsdoc_comment(text):
                continue
            results.append(
                add_comment(
                    source,
                    comment_value(text),
                    SourceLocation.from_node(comment),
                    path,
                    node_loc,
                    include_context,
                )
            )
    return results


def comment_walkers() -> List[Walker]:
    """The leading / inner / trailing passes, in the order they must run."""
    return [
        partial(walk_comments, "leading", True),
        partial(walk_comments, "inner", False),
        partial(walk_comments, "trailing", False),
    ]
