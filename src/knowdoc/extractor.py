from itertools import chain
from typing import Any, Dict, Iterable, List, Optional, Tuple

from knowdoc.comment_parser import ContentParser, parse_comment
from knowdoc.extractors import Walker, comment_walkers, walk_exported
from knowdoc.finders import TargetResolver, find_target
from knowdoc.helpers import get_node_text, make_sort_key, read_source
from knowdoc.logger import logger
from knowdoc.models import Comment, CommentContext, SourceFile, SourceLocation
from knowdoc.settings import DocumentationSettings
from knowdoc.syntax import NodeKey, NodePath, parse_to_ast


class CommentExtractor:
    """
    Per-run state for turning walker callbacks into comment records.

    Holds the visited set (one record per physical comment) and the map from
    documented node to its record that the constructor rule relies on. Create
    one per run; walkers following re-exports feed nodes of other files
    through the same instance, so both are keyed by file as well.
    """

    def __init__(
        self,
        *,
        parse: ContentParser = parse_comment,
        resolve_target: TargetResolver = find_target,
        log: Any = None,
    ) -> None:
        self.parse = parse
        self.resolve_target = resolve_target
        self.log = log if log is not None else logger
        self.visited: set[str] = set()
        self.comments_by_node: Dict[Tuple[str, NodeKey], Comment] = {}

    def add_comment(
        self,
        source: SourceFile,
        text: str,
        comment_loc: SourceLocation,
        path: Optional[NodePath],
        node_loc: SourceLocation,
        include_context: bool,
    ) -> Optional[Comment]:
        # The same comment is reached both as a leading comment of one node
        # and as a trailing comment of its previous sibling.
        key = f"{source.file}:{comment_loc.start.line}:{comment_loc.start.column}"
        if key in self.visited:
            return None
        self.visited.add(key)

        context = CommentContext(
            loc=node_loc,
            file=source.file,
            sort_key=make_sort_key(source.sort_key or "", node_loc.start.line),
        )
        if include_context and path is not None:
            context.ast = path
            parent = path.parent_path
            if parent is not None:
                # sliced from the tree the node belongs to
                context.code = get_node_text(parent.node)

        comment = self.parse(text, comment_loc, context)

        if include_context and path is not None:
            target = self.resolve_target(path) or path
            self.comments_by_node[(source.file, target.key)] = comment
            if path.is_class_method() and path.kind == "constructor":
                return self._merge_constructor(source, path, comment)
        return comment

    def _merge_constructor(
        self, source: SourceFile, path: NodePath, comment: Comment
    ) -> Optional[Comment]:
        if not comment.hideconstructor:
            self.log.debug(
                "A constructor was documented explicitly: document along with the class instead",
                path=source.file,
                line=comment.context.loc.start.line,
            )

        body = path.parent_path
        owner = body.parent_path if body is not None else None
        parent_comment = (
            self.comments_by_node.get((source.file, owner.key))
            if owner is not None
            else None
        )
        if parent_comment is not None:
            parent_comment.constructor_comment = comment
            return None
        if comment.hideconstructor:
            return None
        return comment


def select_walkers(settings: DocumentationSettings) -> List[Walker]:
    if settings.document_exported:
        return [walk_exported]
    return comment_walkers()


def parse_javascript(
    source: SourceFile,
    settings: Optional[DocumentationSettings] = None,
    *,
    parse: ContentParser = parse_comment,
    resolve_target: TargetResolver = find_target,
    log: Any = None,
) -> List[Comment]:
    """
    Parse *source* and return its documentation comments in traversal order.

    Comments merged into a class (constructors) or marked `@lends` are left
    out. The result is not sorted; see `sort_comments`.
    """
    if settings is None:
        settings = DocumentationSettings()
    if source.source is None:
        raise ValueError("source.source must be loaded before parsing")

    ast = parse_to_ast(source.source)
    extractor = CommentExtractor(parse=parse, resolve_target=resolve_target, log=log)

    results = chain.from_iterable(
        walker(ast, source, extractor.add_comment)
        for walker in select_walkers(settings)
    )
    return [c for c in results if c is not None and c.lends is None]


def extract_comments(
    source: SourceFile, settings: Optional[DocumentationSettings] = None, **kw
) -> List[Comment]:
    """
    Like `parse_javascript`, reading the file from disk when the source text
    was not supplied.
    """
    if source.source is None:
        source = source.model_copy(update={"source": read_source(source.file)})
    return parse_javascript(source, settings, **kw)


def sort_comments(comments: Iterable[Comment]) -> List[Comment]:
    """Stable sort by sort key (pass / file order, then line)."""
    return sorted(comments, key=lambda c: c.sort_key)
