import re
from typing import Callable, List, Optional, Tuple

from knowdoc.models import Comment, CommentContext, CommentTag, SourceLocation

ContentParser = Callable[[str, SourceLocation, CommentContext], Comment]

# Tags of the form `@tag {type} name description`
_NAMED_TAGS = {
    "arg",
    "argument",
    "callback",
    "param",
    "prop",
    "property",
    "typedef",
}
# Tags whose whole text is a name path
_NAME_PATH_TAGS = {"alias", "lends", "memberof", "name"}

_LINE_PREFIX = re.compile(r"^\s*\*? ?")
_TAG_START = re.compile(r"^@([A-Za-z][\w-]*)\s*(.*)$", re.S)


def _strip_lines(value: str) -> List[str]:
    return [_LINE_PREFIX.sub("", line, count=1) for line in value.splitlines()]


def _split_type(text: str) -> Tuple[Optional[str], str]:
    """
    Split a leading `{type}` off *text*. Braces may nest, e.g.
    `{{a: number}}`. An unbalanced brace leaves the text untouched.
    """
    if not text.startswith("{"):
        return None, text
    depth = 0
    for idx, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[1:idx].strip(), text[idx + 1 :].lstrip()
    return None, text


def _split_name(text: str) -> Tuple[Optional[str], str]:
    if not text:
        return None, ""
    if text.startswith("["):
        end = text.find("]")
        if end != -1:
            name = text[1:end].split("=", 1)[0].strip()
            return name or None, text[end + 1 :].lstrip()
    parts = text.split(None, 1)
    rest = parts[1] if len(parts) > 1 else ""
    # `@param name - description`
    if rest.startswith("- "):
        rest = rest[2:]
    return parts[0], rest


def _parse_tag(title: str, text: str) -> CommentTag:
    tag_type, rest = _split_type(text)
    name: Optional[str] = None
    if title in _NAMED_TAGS:
        name, rest = _split_name(rest)
    elif title in _NAME_PATH_TAGS:
        name, rest = (rest.strip() or None), ""
    return CommentTag(title=title, description=rest.strip(), name=name, type=tag_type)


def parse_comment(
    value: str, loc: SourceLocation, context: CommentContext
) -> Comment:
    """
    Shallow JSDoc reader: leading description plus one raw record per
    `@tag`. Type expressions are kept verbatim and never interpreted.
    """
    description: List[str] = []
    chunks: List[Tuple[str, List[str]]] = []
    for line in _strip_lines(value):
        m = _TAG_START.match(line.strip())
        if m:
            chunks.append((m.group(1), [m.group(2)]))
        elif chunks:
            chunks[-1][1].append(line)
        else:
            description.append(line)

    tags = [_parse_tag(title, "\n".join(lines).strip()) for title, lines in chunks]

    comment = Comment(
        description="\n".join(description).strip(),
        tags=tags,
        loc=loc,
        context=context,
    )
    for tag in tags:
        if tag.title == "lends":
            comment.lends = tag.name or ""
        elif tag.title == "hideconstructor":
            comment.hideconstructor = True
        elif tag.title == "name" and tag.name:
            comment.name = tag.name
    return comment
