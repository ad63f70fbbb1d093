import re
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter as ts
import tree_sitter_javascript as tsjs

from knowdoc.helpers import get_node_text

JS_LANGUAGE = ts.Language(tsjs.language())
_parser: Optional[ts.Parser] = None

COMMENT_CATEGORIES = ("leading", "inner", "trailing")

NodeKey = Tuple[str, int, int]

_JSDOC_PREFIX = re.compile(r"^\*+")


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(JS_LANGUAGE)
    return _parser


class JavaScriptSyntaxError(ValueError):
    """Raised when the source cannot be parsed as JavaScript."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} ({line}:{column})")
        self.line = line
        self.column = column


def node_key(node: ts.Node) -> NodeKey:
    """
    Identity of a node within one tree. tree-sitter hands out fresh wrapper
    objects on every access, so nodes are compared by type and byte span.
    """
    return (node.type, node.start_byte, node.end_byte)


class NodePath:
    """
    A syntax node together with its ancestry. Walkers pass these to the
    comment callback; target resolution and the constructor rule navigate
    through `parent_path` and `get`.
    """

    __slots__ = ("node",)

    def __init__(self, node: ts.Node) -> None:
        self.node = node

    def __repr__(self) -> str:
        return f"NodePath({self.node.type}@{self.node.start_point[0] + 1})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NodePath) and self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def type(self) -> str:
        return self.node.type

    @property
    def key(self) -> NodeKey:
        return node_key(self.node)

    @property
    def parent_path(self) -> Optional["NodePath"]:
        parent = self.node.parent
        return NodePath(parent) if parent is not None else None

    def get(self, field: str) -> Optional["NodePath"]:
        child = self.node.child_by_field_name(field)
        return NodePath(child) if child is not None else None

    def is_class_method(self) -> bool:
        parent = self.node.parent
        return (
            self.node.type == "method_definition"
            and parent is not None
            and parent.type == "class_body"
        )

    @property
    def kind(self) -> Optional[str]:
        """
        Method kind: "constructor", "get", "set" or "method". None for
        anything that is not a method definition.
        """
        if self.node.type != "method_definition":
            return None
        name = self.node.child_by_field_name("name")
        is_static = False
        for ch in self.node.children:
            if name is not None and ch.start_byte >= name.start_byte:
                break
            if ch.type in ("get", "set"):
                return ch.type
            if ch.type == "static":
                is_static = True
        if name is None or is_static:
            return "method"
        text = get_node_text(name)
        if name.type == "string":
            text = text[1:-1]
        if text == "constructor":
            return "constructor"
        return "method"


def is_jsdoc_comment(text: str) -> bool:
    """
    True for block comments opening with exactly two asterisks (`/** ... */`).
    """
    if not (text.startswith("/*") and text.endswith("*/")) or len(text) < 4:
        return False
    m = _JSDOC_PREFIX.match(comment_value(text))
    return m is not None and len(m.group(0)) == 1


def comment_value(text: str) -> str:
    """Comment text without its delimiters."""
    if text.startswith("/*"):
        return text[2:-2]
    if text.startswith("//"):
        return text[2:]
    return text


class SyntaxTree:
    """
    Parsed JavaScript source plus babel-style comment attachment.

    tree-sitter keeps comments as ordinary sibling nodes. Here each comment
    becomes a *leading* comment of the next non-comment sibling, a *trailing*
    comment of the previous one, and an *inner* comment of its parent when it
    has no non-comment siblings. A comment between two statements is thus both
    trailing and leading.
    """

    def __init__(self, tree: ts.Tree, source_bytes: bytes) -> None:
        self.tree = tree
        self.source_bytes = source_bytes
        self.root = tree.root_node
        self._attached: Optional[Dict[NodeKey, Dict[str, List[ts.Node]]]] = None

    def iter_nodes(self) -> Iterator[ts.Node]:
        """Named nodes in pre-order (parents before children)."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.named_children))

    def comments(self, node: ts.Node, category: str) -> List[ts.Node]:
        if self._attached is None:
            self._attached = self._attach()
        return self._attached.get(node_key(node), {}).get(category, [])

    def _attach(self) -> Dict[NodeKey, Dict[str, List[ts.Node]]]:
        attached: Dict[NodeKey, Dict[str, List[ts.Node]]] = {}

        def add(target: ts.Node, category: str, comment: ts.Node) -> None:
            attached.setdefault(node_key(target), {}).setdefault(
                category, []
            ).append(comment)

        for node in self.iter_nodes():
            children = node.named_children
            if not any(ch.type == "comment" for ch in children):
                continue
            for idx, ch in enumerate(children):
                if ch.type != "comment":
                    continue
                prev = next(
                    (c for c in reversed(children[:idx]) if c.type != "comment"),
                    None,
                )
                nxt = next(
                    (c for c in children[idx + 1 :] if c.type != "comment"), None
                )
                if nxt is not None:
                    add(nxt, "leading", ch)
                if prev is not None:
                    add(prev, "trailing", ch)
                if prev is None and nxt is None:
                    add(node, "inner", ch)
        return attached


def _first_error(root: ts.Node) -> Optional[ts.Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def parse_to_ast(source: str) -> SyntaxTree:
    """
    Parse JavaScript (including JSX) source text.

    Raises JavaScriptSyntaxError when the source does not parse cleanly.
    """
    source_bytes = source.encode("utf-8")
    tree = _get_parser().parse(source_bytes)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        raise JavaScriptSyntaxError(
            "Unable to parse JavaScript source",
            line=bad.start_point[0] + 1,
            column=bad.start_point[1],
        )
    return SyntaxTree(tree, source_bytes)
