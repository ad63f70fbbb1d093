from knowdoc.extractor import (
    CommentExtractor,
    extract_comments,
    parse_javascript,
    sort_comments,
)
from knowdoc.models import Comment, CommentContext, SourceFile, SourceLocation
from knowdoc.settings import DocumentationSettings

__all__ = [
    "Comment",
    "CommentContext",
    "CommentExtractor",
    "DocumentationSettings",
    "SourceFile",
    "SourceLocation",
    "extract_comments",
    "parse_javascript",
    "sort_comments",
]
