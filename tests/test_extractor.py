from pathlib import Path

import pytest

from knowdoc import (
    CommentExtractor,
    DocumentationSettings,
    SourceFile,
    extract_comments,
    parse_javascript,
    sort_comments,
)
from knowdoc.comment_parser import parse_comment
from knowdoc.models import Position, SourceLocation
from knowdoc.syntax import NodePath, parse_to_ast

SAMPLES = Path(__file__).parent / "samples"


# ------------------------------------------------------------------ #
# helpers
# ------------------------------------------------------------------ #
class _RecordingLog:
    def __init__(self):
        self.events = []

    def debug(self, event, **kw):
        self.events.append((event, kw))


def _loc(line: int, column: int = 0) -> SourceLocation:
    return SourceLocation(
        start=Position(line=line, column=column),
        end=Position(line=line, column=column + 10),
    )


def _run(code: str, **kw):
    return parse_javascript(SourceFile(file="test.js", source=code), **kw)


def _descriptions(comments):
    return [c.description for c in comments]


# ------------------------------------------------------------------ #
# deduplication
# ------------------------------------------------------------------ #
def test_same_comment_is_recorded_once():
    extractor = CommentExtractor()
    source = SourceFile(file="a.js", source="")

    first = extractor.add_comment(source, "* one ", _loc(1), None, _loc(2), False)
    other = extractor.add_comment(source, "* two ", _loc(5), None, _loc(6), False)
    again = extractor.add_comment(source, "* one ", _loc(1), None, _loc(2), False)

    assert first is not None and first.description == "one"
    assert other is not None
    assert again is None


def test_dedup_key_uses_comment_position_and_file():
    extractor = CommentExtractor()
    a = SourceFile(file="a.js", source="")
    b = SourceFile(file="b.js", source="")

    assert extractor.add_comment(a, "* x ", _loc(1, 4), None, _loc(2), False)
    # same line, different column
    assert extractor.add_comment(a, "* x ", _loc(1, 5), None, _loc(2), False)
    # same position, different file
    assert extractor.add_comment(b, "* x ", _loc(1, 4), None, _loc(2), False)
    # same comment, different documented node: still a duplicate
    assert extractor.add_comment(a, "* x ", _loc(1, 4), None, _loc(9), False) is None


def test_abutting_siblings_produce_two_records():
    comments = _run("/** first */ var a = 1;/** second */ var b = 2;\n")
    assert _descriptions(comments) == ["first", "second"]


def test_comment_between_statements_keeps_leading_context():
    comments = _run("var a = 1;\n/** doc */\nvar b = 2;\n")
    assert len(comments) == 1
    # recorded by the leading pass, so it documents `var b` with context
    assert comments[0].context.loc.start.line == 3
    assert comments[0].context.ast is not None


# ------------------------------------------------------------------ #
# context
# ------------------------------------------------------------------ #
def test_context_and_sort_key():
    code = "\n/** Adds */\nfunction add(a, b) { return a + b; }\n"
    (comment,) = _run(code)

    assert comment.context.file == "test.js"
    assert comment.context.loc.start.line == 3
    assert comment.loc.start.line == 2
    assert comment.sort_key == "test.js 00000003"
    assert comment.context.ast.type == "function_declaration"
    assert "function add" in comment.context.code


def test_explicit_base_sort_key():
    source = SourceFile(file="test.js", source="/** a */\nvar a;\n", sort_key="0001")
    (comment,) = parse_javascript(source)
    assert comment.sort_key == "0001 00000002"


def test_serialization_excludes_node_path():
    (comment,) = _run("/** Adds */\nfunction add() {}\n")
    dumped = comment.model_dump()
    assert "ast" not in dumped["context"]
    assert '"ast"' not in comment.model_dump_json()
    assert "NodePath" not in repr(comment)
    assert comment.context.ast is not None


def test_no_context_for_inner_and_trailing_passes():
    comments = _run("function f() {\n  /** inner */\n}\n")
    (comment,) = comments
    assert comment.description == "inner"
    assert comment.context.ast is None
    assert comment.context.code is None


def test_traversal_order_and_sorting():
    code = "function f() {\n  /** inner */\n}\n/** g doc */\nfunction g() {}\n"
    comments = _run(code)
    # leading pass runs before the inner pass
    assert _descriptions(comments) == ["g doc", "inner"]
    assert _descriptions(sort_comments(comments)) == ["inner", "g doc"]


def test_non_jsdoc_comments_are_ignored():
    code = "// line\n/* block */\n/*** banner */\nfunction f() {}\n"
    assert _run(code) == []


# ------------------------------------------------------------------ #
# lends
# ------------------------------------------------------------------ #
def test_lends_comments_are_filtered():
    produced = []

    def spy(text, loc, context):
        comment = parse_comment(text, loc, context)
        produced.append(comment)
        return comment

    code = "/** @lends Foo.prototype */\nvar proto = {};\n/** kept */\nfunction f() {}\n"
    comments = _run(code, parse=spy)

    assert _descriptions(comments) == ["kept"]
    assert any(c.lends == "Foo.prototype" for c in produced)


# ------------------------------------------------------------------ #
# constructor rule
# ------------------------------------------------------------------ #
def test_constructor_merges_into_documented_class():
    log = _RecordingLog()
    code = (
        "/** Foo class */\n"
        "class Foo {\n"
        "  /** Make a Foo */\n"
        "  constructor(a) {}\n"
        "}\n"
    )
    comments = _run(code, log=log)

    assert _descriptions(comments) == ["Foo class"]
    ctor = comments[0].constructor_comment
    assert ctor is not None
    assert ctor.description == "Make a Foo"
    assert len(log.events) == 1

    dumped = comments[0].model_dump()
    assert dumped["constructor_comment"]["description"] == "Make a Foo"
    assert "ast" not in dumped["constructor_comment"]["context"]


def test_constructor_merges_into_exported_class():
    code = (
        "/** Foo class */\n"
        "export class Foo {\n"
        "  /** Make a Foo */\n"
        "  constructor() {}\n"
        "}\n"
    )
    (comment,) = _run(code)
    assert comment.constructor_comment.description == "Make a Foo"


def test_constructor_merges_into_class_expression():
    code = (
        "/** Foo class */\n"
        "const Foo = class {\n"
        "  /** Make a Foo */\n"
        "  constructor() {}\n"
        "};\n"
    )
    (comment,) = _run(code)
    assert comment.constructor_comment.description == "Make a Foo"


def test_hidden_constructor_of_undocumented_class_is_dropped():
    log = _RecordingLog()
    code = "class Foo {\n  /** @hideconstructor */\n  constructor() {}\n}\n"
    assert _run(code, log=log) == []
    assert log.events == []


def test_constructor_of_undocumented_class_is_standalone():
    log = _RecordingLog()
    code = "class Foo {\n  /** Build it */\n  constructor() {}\n}\n"
    (comment,) = _run(code, log=log)

    assert comment.description == "Build it"
    assert comment.context.ast.kind == "constructor"
    assert comment.context.code.startswith("{")
    assert len(log.events) == 1


def test_quoted_constructor_merges_into_class():
    code = '/** Foo */\nclass Foo {\n  /** ctor */\n  "constructor"() {}\n}\n'
    comments = _run(code)
    assert _descriptions(comments) == ["Foo"]
    assert comments[0].constructor_comment.description == "ctor"


def test_hidden_constructor_still_merges():
    code = (
        "/** Foo */\n"
        "class Foo {\n"
        "  /** @hideconstructor */\n"
        "  constructor() {}\n"
        "}\n"
    )
    (comment,) = _run(code)
    assert comment.constructor_comment.hideconstructor is True


def test_constructor_visited_before_class_falls_through():
    ast = parse_to_ast("class Foo {\n  constructor() {}\n}\n")
    cls = NodePath(ast.root.named_children[0])
    ctor = NodePath(cls.get("body").node.named_children[0])
    assert ctor.kind == "constructor"
    source = SourceFile(file="a.js", source="")

    # members before their class: the constructor cannot be merged
    extractor = CommentExtractor()
    ctor_comment = extractor.add_comment(
        source, "* ctor ", _loc(1), ctor, SourceLocation.from_node(ctor.node), True
    )
    cls_comment = extractor.add_comment(
        source, "* cls ", _loc(2), cls, SourceLocation.from_node(cls.node), True
    )
    assert ctor_comment is not None and ctor_comment.description == "ctor"
    assert cls_comment is not None and cls_comment.constructor_comment is None

    # class first: merged
    extractor = CommentExtractor()
    cls_comment = extractor.add_comment(
        source, "* cls ", _loc(2), cls, SourceLocation.from_node(cls.node), True
    )
    ctor_comment = extractor.add_comment(
        source, "* ctor ", _loc(1), ctor, SourceLocation.from_node(ctor.node), True
    )
    assert ctor_comment is None
    assert cls_comment.constructor_comment.description == "ctor"


def test_documented_nodes_are_keyed_by_file():
    ast = parse_to_ast("class Foo {\n  constructor() {}\n}\n")
    cls = NodePath(ast.root.named_children[0])
    ctor = NodePath(cls.get("body").node.named_children[0])
    a = SourceFile(file="a.js", source="")
    b = SourceFile(file="b.js", source="")

    # same byte span in another file is a different class
    extractor = CommentExtractor()
    cls_comment = extractor.add_comment(
        a, "* cls ", _loc(1), cls, SourceLocation.from_node(cls.node), True
    )
    ctor_comment = extractor.add_comment(
        b, "* ctor ", _loc(2), ctor, SourceLocation.from_node(ctor.node), True
    )
    assert ctor_comment is not None and ctor_comment.description == "ctor"
    assert cls_comment.constructor_comment is None
    assert set(extractor.comments_by_node) == {("a.js", cls.key), ("b.js", ctor.key)}


def test_context_code_comes_from_the_node_tree():
    ast = parse_to_ast("// other file\n/** f */\nfunction f() {}\n")
    fn = NodePath(ast.root.named_children[-1])
    source = SourceFile(file="root.js", source="var unrelated = 1;\n")

    comment = CommentExtractor().add_comment(
        source, "* f ", _loc(2), fn, SourceLocation.from_node(fn.node), True
    )
    assert "function f() {}" in comment.context.code
    assert "unrelated" not in comment.context.code


def test_custom_target_resolver():
    seen = []

    def resolve(path):
        seen.append(path.type)
        return None

    comments = _run("/** x */\nconst x = 1;\n", resolve_target=resolve)
    assert _descriptions(comments) == ["x"]
    assert seen == ["lexical_declaration"]


# ------------------------------------------------------------------ #
# whole files
# ------------------------------------------------------------------ #
def test_sample_file_all_comments():
    source = SourceFile(file=str(SAMPLES / "shapes.js"))
    comments = extract_comments(source)

    assert _descriptions(comments) == [
        "A point on the plane.",
        "Distance to the origin.",
        "Mirror the point.",
        "Scale a point.",
    ]
    point = comments[0]
    assert [t.name for t in point.constructor_comment.tags] == ["x", "y"]
    assert comments == sort_comments(comments)


def test_sample_file_exported_only():
    source = SourceFile(file=str(SAMPLES / "shapes.js"))
    comments = extract_comments(source, DocumentationSettings(document_exported=True))

    assert _descriptions(comments) == [
        "A point on the plane.",
        "Distance to the origin.",
        "Scale a point.",
        "",
    ]
    # constructors are not walked in exported mode
    assert comments[0].constructor_comment is None
    assert comments[-1].context.ast.type == "export_statement"


def test_source_must_be_loaded():
    with pytest.raises(ValueError):
        parse_javascript(SourceFile(file="missing.js"))


def test_syntax_errors_propagate():
    with pytest.raises(ValueError):
        _run("class {{{\n")
