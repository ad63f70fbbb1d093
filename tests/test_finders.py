from knowdoc.finders import find_target
from knowdoc.syntax import NodePath, parse_to_ast


def _first(source: str) -> NodePath:
    ast = parse_to_ast(source)
    return NodePath(ast.root.named_children[0])


def test_plain_declaration_is_its_own_target():
    path = _first("function f() {}\n")
    assert find_target(path) == path


def test_variable_resolves_to_initializer():
    target = find_target(_first("const add = (a, b) => a + b;\n"))
    assert target.type == "arrow_function"


def test_variable_without_initializer_resolves_to_declarator():
    target = find_target(_first("let x;\n"))
    assert target.type == "variable_declarator"


def test_export_unwraps_declaration():
    assert find_target(_first("export class A {}\n")).type == "class_declaration"
    assert find_target(_first("export const A = class {};\n")).type == "class"
    assert find_target(_first("export default 42;\n")).type == "number"


def test_assignment_resolves_to_right_hand_side():
    target = find_target(_first("a.b = function () {};\n"))
    assert target.type in ("function_expression", "function")


def test_object_pair_resolves_to_value():
    ast = parse_to_ast("var o = { k: 1 };\n")
    pair = next(n for n in ast.iter_nodes() if n.type == "pair")
    assert find_target(NodePath(pair)).type == "number"


def test_class_field_resolves_to_value():
    ast = parse_to_ast("class A { f = () => 1; g; }\n")
    fields = [n for n in ast.iter_nodes() if n.type == "field_definition"]
    assert find_target(NodePath(fields[0])).type == "arrow_function"
    assert find_target(NodePath(fields[1])).type == "field_definition"


def test_missing_path():
    assert find_target(None) is None
