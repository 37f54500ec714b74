from __future__ import annotations

from dataclasses import dataclass, field

from . import t
from .config import TagPolicy, TagRegistry, defaultRegistry
from .document import Document, TagNode

if t.TYPE_CHECKING:
    ResultValT = t.TypeVar("ResultValT")
    OkT: t.TypeAlias = "tuple[ResultValT, int, t.Literal[False]]"
    ErrT: t.TypeAlias = "tuple[None, int, t.Literal[True]]"
    ResultT: t.TypeAlias = "OkT[ResultValT] | ErrT"


# Parse functions return (value, nextIndex, isErr) triples,
# so callers can destructure without unwrapping:
#   name, i, _ = parseTagName(s, i)
#   if name is None: ...
def Ok(val: ResultValT, index: int) -> OkT[ResultValT]:
    return (val, index, False)


def Err(index: int) -> ErrT:
    return (None, index, True)


@dataclass
class TagStackEntry:
    container: t.ContainerT
    policy: TagPolicy

    @property
    def name(self) -> str | None:
        if isinstance(self.container, TagNode):
            return self.container.name
        return None

    @property
    def isRoot(self) -> bool:
        return isinstance(self.container, Document)


@dataclass
class TagStack:
    # The bottom entry is always the document itself.
    tags: list[TagStackEntry]

    @staticmethod
    def forDocument(doc: Document, policy: TagPolicy) -> TagStack:
        return TagStack([TagStackEntry(doc, policy)])

    @property
    def current(self) -> TagStackEntry:
        return self.tags[-1]

    @property
    def depth(self) -> int:
        # Number of open tags, not counting the document.
        return len(self.tags) - 1

    def printOpenTags(self) -> list[str]:
        return [f"[{x.name}]" for x in self.tags if not x.isRoot]

    def push(self, tag: TagNode, policy: TagPolicy) -> None:
        self.tags.append(TagStackEntry(tag, policy))

    def pop(self) -> TagStackEntry:
        assert len(self.tags) > 1, "Tried to pop the document off the tag stack."
        return self.tags.pop()

    def getDeepestFromTag(self, tagName: str) -> int | None:
        # Index into self.tags of the innermost open tag with that name.
        for i in range(len(self.tags) - 1, 0, -1):
            if self.tags[i].name == tagName:
                return i
        return None

    def blockersAbove(self, index: int) -> list[TagStackEntry]:
        # Open tags above `index` that can't be closed without their own closing marker.
        return [entry for entry in self.tags[index + 1 :] if not entry.policy.implicitClose]


@dataclass
class Stream:
    _chars: str
    _len: int
    registry: TagRegistry
    strict: bool
    doc: Document
    openTags: TagStack = field(init=False)

    def __init__(self, chars: str, registry: TagRegistry | None = None, strict: bool = False) -> None:
        self._chars = chars
        self._len = len(chars)
        self.registry = registry if registry is not None else defaultRegistry()
        self.strict = strict
        self.doc = Document(chars)
        self.openTags = TagStack.forDocument(self.doc, self.registry.policyFor(None))

    def __getitem__(self, key: int) -> str:
        if key < 0 or key >= self._len:
            return ""
        return self._chars[key]

    def slice(self, start: int | None, stop: int | None) -> str:
        if start is not None and start < 0:
            start = 0
        if stop is not None and stop < 0:
            stop = 0
        return self._chars[start:stop]

    def eof(self, index: int) -> bool:
        return index >= self._len

    def __len__(self) -> int:
        return self._len

    def line(self, index: int) -> int:
        return self.doc.line(index)

    def col(self, index: int) -> int:
        return self.doc.col(index)

    def loc(self, index: int) -> str:
        return self.doc.loc(index)

    def skipTo(self, start: int, text: str) -> ResultT[str]:
        # Skip forward until encountering `text`.
        # Produces the text encountered before this point.
        i = self._chars.find(text, start)
        if i == -1:
            return Err(start)
        return Ok(self.slice(start, i), i)
