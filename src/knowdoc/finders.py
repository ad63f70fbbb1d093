from typing import Callable, Optional

from knowdoc.syntax import NodePath

TargetResolver = Callable[[NodePath], Optional[NodePath]]


def find_target(path: Optional[NodePath]) -> Optional[NodePath]:
    """
    Resolve the node a comment really documents.

    Comments attach to statements, while documentation describes what the
    statement declares: `/** doc */ export const x = () => {}` documents the
    arrow function, not the export statement. Returns the resolved path, or
    None when the expected child is missing.
    """
    if path is None:
        return None

    if path.type == "export_statement":
        declaration = path.get("declaration") or path.get("value")
        if declaration is not None:
            path = declaration

    if path.type in ("lexical_declaration", "variable_declaration"):
        # var x = init;
        declarators = [
            ch for ch in path.node.named_children if ch.type == "variable_declarator"
        ]
        if not declarators:
            return None
        path = NodePath(declarators[0])

    if path.type == "variable_declarator":
        path = path.get("value") or path
    elif path.type == "expression_statement":
        # foo.x = TARGET
        expr = path.node.named_children[0] if path.node.named_children else None
        if expr is not None and expr.type == "assignment_expression":
            right = expr.child_by_field_name("right")
            if right is None:
                return None
            path = NodePath(right)
    elif path.type in ("pair", "field_definition"):
        # var x = { a: TARGET };  class { a = TARGET }
        path = path.get("value") or path

    return path
