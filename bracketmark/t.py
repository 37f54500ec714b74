# pylint: skip-file
# Module for holding types, for easy importing into the rest of the codebase
from __future__ import annotations

import sys

# The only things that should be available during runtime.
from typing import TYPE_CHECKING, NamedTuple, TypeVar, cast

# Only available in 3.11, so stub them out for earlier versions
if sys.version_info >= (3, 11):
    from typing import assert_never
else:
    from typing_extensions import assert_never


if TYPE_CHECKING:
    from typing import (
        Any,
        Callable,
        Generator,
        Iterable,
        Iterator,
        Literal,
        Mapping,
        TextIO,
        TypeAlias,
    )

    from typing_extensions import (
        TypeIs,
    )

    from .config import TagPolicy
    from .document import Document, TagNode, TextNode
    from .offsets import Offsets

    NodeT: TypeAlias = "TagNode | TextNode"
    ContainerT: TypeAlias = "Document | TagNode"

    # (position, length) pair recorded while parsing
    SpanT: TypeAlias = tuple[int, int]

    AttrsT: TypeAlias = dict[str, str]

    PredicateT: TypeAlias = Callable[[TagNode], bool]
    RendererT: TypeAlias = Callable[[str, AttrsT], str]
    # (tagName, body, attrs) -> str, for tags with no renderer of their own
    FallbackT: TypeAlias = Callable[[str, str, AttrsT], str]

    # Renders one text node: (text, sourceBegin, enclosing policy, ledger) -> output
    TextFunctionT: TypeAlias = Callable[[str, int, TagPolicy, Offsets], str]
