from typing import Callable, List, Optional

from knowdoc.models import Comment, SourceFile, SourceLocation
from knowdoc.syntax import NodePath, SyntaxTree

# Callback invoked by walkers for every comment they discover:
# (source, comment text, comment location, documented node path,
#  documented node location, capture structural context)
AddComment = Callable[
    [SourceFile, str, SourceLocation, NodePath, SourceLocation, bool],
    Optional[Comment],
]

# A walker strategy. Walkers must visit enclosing declarations before their
# nested members (pre-order): the constructor rule only merges a constructor
# comment into its class when the class comment has already been produced.
Walker = Callable[[SyntaxTree, SourceFile, AddComment], List[Optional[Comment]]]
