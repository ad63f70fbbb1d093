import os
from typing import Dict, List, Optional, Tuple

import tree_sitter as ts

from knowdoc.extractors.base import AddComment
from knowdoc.finders import find_target
from knowdoc.helpers import get_node_text, read_source
from knowdoc.logger import get_logger
from knowdoc.models import Comment, SourceFile, SourceLocation
from knowdoc.syntax import (
    NodePath,
    SyntaxTree,
    comment_value,
    is_jsdoc_comment,
    parse_to_ast,
)

logger = get_logger(walker="exported")

_RESOLVE_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs")
_NAMED_DECLARATIONS = (
    "class_declaration",
    "function_declaration",
    "generator_function_declaration",
)
_LEXICAL_DECLARATIONS = ("lexical_declaration", "variable_declaration")


def walk_exported(
    ast: SyntaxTree, source: SourceFile, add_comment: AddComment
) -> List[Optional[Comment]]:
    """
    Report comments of exported declarations only.

    Undocumented exports still get a blank comment so that every export
    shows up. Members of exported classes and object literals are reported
    after their owner; constructors are left to the class documentation.
    """
    return _ExportWalker(source, add_comment).walk(ast)


class _ExportWalker:
    def __init__(self, source: SourceFile, add_comment: AddComment) -> None:
        self.source = source
        self.add_comment = add_comment
        self.results: List[Optional[Comment]] = []
        self._modules: Dict[str, Tuple[SyntaxTree, SourceFile]] = {}

    def walk(self, ast: SyntaxTree) -> List[Optional[Comment]]:
        for node in ast.root.named_children:
            if node.type == "export_statement":
                self._handle_export(ast, self.source, node)
        return self.results

    # --- exports ----------------------------------------------------
    def _handle_export(
        self, ast: SyntaxTree, source: SourceFile, node: ts.Node
    ) -> None:
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            self._traverse_exported_subtree(ast, source, NodePath(declaration))
            return

        # export default <expression>
        value = node.child_by_field_name("value")
        if value is not None:
            self._traverse_exported_subtree(ast, source, NodePath(value))
            return

        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is None:
            # export * from "module"
            return

        target: Optional[Tuple[SyntaxTree, SourceFile]] = (ast, source)
        module_node = node.child_by_field_name("source")
        if module_node is not None:
            module = get_node_text(module_node).strip("\"'`")
            target = self._load_module(source, module)
            if target is None:
                return
        target_ast, target_source = target

        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            local = get_node_text(spec.child_by_field_name("name"))
            alias = spec.child_by_field_name("alias")
            exported_name = get_node_text(alias) if alias is not None else local
            binding = _find_binding(target_ast, local)
            if binding is None:
                logger.debug(
                    "Exported binding not found",
                    path=target_source.file,
                    name=local,
                    line=spec.start_point[0] + 1,
                )
                continue
            self._traverse_exported_subtree(
                target_ast, target_source, binding, override_name=exported_name
            )

    def _traverse_exported_subtree(
        self,
        ast: SyntaxTree,
        source: SourceFile,
        path: NodePath,
        override_name: Optional[str] = None,
    ) -> None:
        parent = path.parent_path
        attach = parent if parent is not None and parent.type == "export_statement" else path
        self._add_comments(ast, source, attach, override_name)

        target = find_target(path)
        if target is None:
            return
        if target.type in ("class_declaration", "class"):
            body = target.get("body")
            if body is not None:
                self._document_members(ast, source, body)
        elif target.type == "object":
            self._document_members(ast, source, target)

    def _document_members(
        self, ast: SyntaxTree, source: SourceFile, owner: NodePath
    ) -> None:
        for ch in owner.node.named_children:
            member = NodePath(ch)
            if ch.type == "method_definition":
                # Constructor parameters are documented with the class itself.
                if member.kind == "constructor":
                    continue
                self._add_comments(ast, source, member)
            elif ch.type in ("field_definition", "pair"):
                self._add_comments(ast, source, member)

    # --- comments ---------------------------------------------------
    def _add_comments(
        self,
        ast: SyntaxTree,
        source: SourceFile,
        path: NodePath,
        override_name: Optional[str] = None,
    ) -> None:
        comments = self._get_comments(ast, source, path)
        if override_name:
            for comment in comments:
                comment.name = override_name
        self.results.extend(comments)

    def _get_comments(
        self, ast: SyntaxTree, source: SourceFile, path: NodePath
    ) -> List[Comment]:
        node_loc = SourceLocation.from_node(path.node)
        texts = [
            c
            for c in ast.comments(path.node, "leading")
            if is_jsdoc_comment(get_node_text(c))
        ]
        if not texts:
            # The first declarator borrows the comment of its declaration.
            parent = path.parent_path
            if (
                path.type == "variable_declarator"
                and parent is not None
                and _first_declarator(parent) == path.node.start_byte
            ):
                grand = parent.parent_path
                if grand is not None and grand.type == "export_statement":
                    parent = grand
                return self._get_comments(ast, source, parent)
            added = self.add_comment(source, "", node_loc, path, node_loc, True)
            return [added] if added else []

        added_comments = []
        for c in texts:
            added = self.add_comment(
                source,
                comment_value(get_node_text(c)),
                SourceLocation.from_node(c),
                path,
                node_loc,
                True,
            )
            if added:
                added_comments.append(added)
        return added_comments

    # --- modules ----------------------------------------------------
    def _load_module(
        self, source: SourceFile, module: str
    ) -> Optional[Tuple[SyntaxTree, SourceFile]]:
        if not module.startswith("."):
            logger.debug(
                "Skipping re-export from external module",
                path=source.file,
                module=module,
            )
            return None
        base = os.path.normpath(os.path.join(os.path.dirname(source.file), module))
        candidates = [base]
        candidates.extend(f"{base}{suf}" for suf in _RESOLVE_SUFFIXES)
        candidates.extend(os.path.join(base, f"index{suf}") for suf in _RESOLVE_SUFFIXES)
        resolved = next((c for c in candidates if os.path.isfile(c)), None)
        if resolved is None:
            logger.warning(
                "Unable to resolve re-exported module",
                path=source.file,
                module=module,
            )
            return None
        if resolved not in self._modules:
            other = SourceFile(
                file=resolved, source=read_source(resolved), sort_key=source.sort_key
            )
            self._modules[resolved] = (parse_to_ast(other.source or ""), other)
        return self._modules[resolved]


def _first_declarator(declaration: NodePath) -> Optional[int]:
    for ch in declaration.node.named_children:
        if ch.type == "variable_declarator":
            return ch.start_byte
    return None


def _find_binding(ast: SyntaxTree, name: str) -> Optional[NodePath]:
    """
    Find the top-level declaration of *name*, looking through `export`
    wrappers. Variables resolve to their declarator.
    """
    for node in ast.root.named_children:
        if node.type == "export_statement":
            node = node.child_by_field_name("declaration") or node
        if node.type in _NAMED_DECLARATIONS:
            if get_node_text(node.child_by_field_name("name")) == name:
                return NodePath(node)
        elif node.type in _LEXICAL_DECLARATIONS:
            for decl in node.named_children:
                if decl.type != "variable_declarator":
                    continue
                if get_node_text(decl.child_by_field_name("name")) == name:
                    return NodePath(decl)
    return None
