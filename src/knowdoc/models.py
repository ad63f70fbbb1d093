from pydantic import BaseModel, Field, model_validator
from typing import Any, List, Optional

# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


class Position(BaseModel):
    line: int  # 1-based
    column: int  # 0-based


class SourceLocation(BaseModel):
    start: Position
    end: Position

    @classmethod
    def from_node(cls, node: Any) -> "SourceLocation":
        """
        Build a location from a tree-sitter node (rows are 0-based there).
        """
        return cls(
            start=Position(line=node.start_point[0] + 1, column=node.start_point[1]),
            end=Position(line=node.end_point[0] + 1, column=node.end_point[1]),
        )


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class SourceFile(BaseModel):
    file: str  # path or other file identifier
    source: Optional[str] = None  # loaded from `file` when missing
    sort_key: Optional[str] = None  # base ordering key, defaults to `file`

    @model_validator(mode="after")
    def _default_sort_key(self) -> "SourceFile":
        if self.sort_key is None:
            self.sort_key = self.file
        return self


# ---------------------------------------------------------------------------
# Comment records
# ---------------------------------------------------------------------------


class CommentContext(BaseModel):
    loc: SourceLocation  # location of the documented node
    file: str
    sort_key: str
    code: Optional[str] = None  # source of the documented node's parent

    # Runtime links
    ast: Optional[Any] = Field(default=None, exclude=True, repr=False)


class CommentTag(BaseModel):
    title: str
    description: str = ""
    name: Optional[str] = None
    type: Optional[str] = None  # raw type expression, not interpreted


class Comment(BaseModel):
    description: str = ""
    tags: List[CommentTag] = Field(default_factory=list)
    loc: SourceLocation  # location of the comment itself
    context: CommentContext

    name: Optional[str] = None
    lends: Optional[str] = None  # set (possibly empty) when marked @lends
    hideconstructor: bool = False

    constructor_comment: Optional["Comment"] = None

    @property
    def sort_key(self) -> str:
        return self.context.sort_key
