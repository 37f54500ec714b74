from __future__ import annotations

import bisect
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field

from . import t


@dataclass
class Node(metaclass=ABCMeta):
    begin: int
    end: int
    # Every node shares the document's source; never copied per node.
    document: Document = field(repr=False, compare=False)

    @property
    def sourceText(self) -> str:
        return self.document.getString(self.begin, self.end)

    @abstractmethod
    def spans(self) -> t.Iterator[tuple[int, int]]:
        pass


@dataclass
class TextNode(Node):
    def spans(self) -> t.Iterator[tuple[int, int]]:
        yield (self.begin, self.end)

    def __str__(self) -> str:
        return self.sourceText


@dataclass
class TagNode(Node):
    name: str
    # End of the opening marker, where the body starts.
    bodyBegin: int
    # Start of the closing marker; None if the tag was closed implicitly.
    closeBegin: int | None = None
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[t.NodeT] = field(default_factory=list)
    depth: int = 0

    def addChild(self, node: t.NodeT) -> None:
        self.children.append(node)

    @property
    def attribute(self) -> str | None:
        # The `[url=http://...]` form; stored under the tag's own name.
        return self.attrs.get(self.name)

    @property
    def bodyEnd(self) -> int:
        return self.closeBegin if self.closeBegin is not None else self.end

    @property
    def body(self) -> str:
        return self.document.getString(self.bodyBegin, self.bodyEnd)

    @property
    def hasClosingMarker(self) -> bool:
        return self.closeBegin is not None

    @property
    def openSpan(self) -> tuple[int, int]:
        return (self.begin, self.bodyBegin)

    @property
    def closeSpan(self) -> tuple[int, int] | None:
        if self.closeBegin is None:
            return None
        return (self.closeBegin, self.end)

    def spans(self) -> t.Iterator[tuple[int, int]]:
        yield self.openSpan
        for child in self.children:
            yield from child.spans()
        if self.closeSpan is not None:
            yield self.closeSpan

    def walk(self) -> t.Iterator[TagNode]:
        yield self
        for child in self.children:
            if isinstance(child, TagNode):
                yield from child.walk()

    def __str__(self) -> str:
        return self.sourceText


@dataclass
class Document:
    """
    Root of a parsed tree.

    Besides the children, the document keeps every (position, length)
    pair the parser recorded, in position order:

        a [font size="10" family="verdana"] testing [/font]

        offsets           (2, 33), (44, 7)
        attributeOffsets  (14, 2), (26, 7)

    With `offsets` alone the markup can be separated from the literal content.
    """

    source: str
    children: list[t.NodeT] = field(default_factory=list)
    offsets: list[t.SpanT] = field(default_factory=list)
    attributeOffsets: list[t.SpanT] = field(default_factory=list)
    # Sorted positions of every "\n", for line:col lookups.
    lineBreaks: list[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.lineBreaks = [i for i, char in enumerate(self.source) if char == "\n"]

    @property
    def begin(self) -> int:
        return 0

    @property
    def end(self) -> int:
        return len(self.source)

    def addChild(self, node: t.NodeT) -> None:
        self.children.append(node)

    def getString(self, start: int, end: int) -> str:
        return self.source[start:end]

    def line(self, index: int) -> int:
        return bisect.bisect_left(self.lineBreaks, index) + 1

    def col(self, index: int) -> int:
        lineIndex = bisect.bisect_left(self.lineBreaks, index)
        if lineIndex == 0:
            return index + 1
        startOfCol = self.lineBreaks[lineIndex - 1]
        return index - startOfCol

    def loc(self, index: int) -> str:
        return f"{self.line(index)}:{self.col(index)}"

    def spans(self) -> t.Iterator[tuple[int, int]]:
        for child in self.children:
            yield from child.spans()

    def reconstruct(self) -> str:
        return "".join(self.getString(start, end) for start, end in self.spans())

    def walk(self) -> t.Iterator[TagNode]:
        for child in self.children:
            if isinstance(child, TagNode):
                yield from child.walk()


def debugNode(node: Node, indent: int = 0) -> str:
    pad = "  " * indent
    if isinstance(node, TextNode):
        return f"{pad}TEXT {node.begin}-{node.end} {node.sourceText!r}"
    assert isinstance(node, TagNode)
    attrs = "".join(f" {k}={v!r}" for k, v in node.attrs.items())
    closing = "" if node.hasClosingMarker else " (implicit close)"
    lines = [f"{pad}TAG [{node.name}{attrs}] {node.begin}-{node.end}{closing}"]
    lines.extend(debugNode(child, indent + 1) for child in node.children)
    return "\n".join(lines)


def debugTree(doc: Document) -> str:
    lines = [f"DOCUMENT {len(doc.source)} chars"]
    lines.extend(debugNode(child, 1) for child in doc.children)
    lines.append("offsets: " + ", ".join(f"{pos}:{length}" for pos, length in doc.offsets))
    lines.append("attributeOffsets: " + ", ".join(f"{pos}:{length}" for pos, length in doc.attributeOffsets))
    return "\n".join(lines)
