from knowdoc.extractors.base import AddComment, Walker
from knowdoc.extractors.comments import comment_walkers, walk_comments
from knowdoc.extractors.exported import walk_exported

__all__ = [
    "AddComment",
    "Walker",
    "comment_walkers",
    "walk_comments",
    "walk_exported",
]
