from __future__ import annotations

from . import messages as m
from . import t
from .config import TagPolicy, TagRegistry
from .document import Document, TagNode, TextNode
from .errors import StructuralParseError
from .stream import Err, Ok, Stream, TagStackEntry

if t.TYPE_CHECKING:
    from .stream import ResultT


class StartMarker(t.NamedTuple):
    tag: TagNode
    policy: TagPolicy
    attrSpans: list[t.SpanT]


def parse(source: str, registry: TagRegistry | None = None, strict: bool = False) -> Document:
    """
    Parses `source` into a Document.

    In strict mode, unknown tag names and closing markers
    that don't close anything raise StructuralParseError.
    Otherwise they're kept as literal text (with a warning),
    so the source can always be rebuilt from the tree.
    """
    s = Stream(source, registry=registry, strict=strict)
    nodesFromStream(s, 0)
    return s.doc


def nodesFromStream(s: Stream, start: int) -> None:
    # Consumes the stream until eof, building the tree in s.doc.
    # Text accumulates from `textStart` until a marker is accepted.
    i = start
    textStart = start
    while not s.eof(i):
        _, i, err = s.skipTo(i, "[")
        if err:
            break
        if s[i + 1] == "/":
            name, end, _ = parseEndMarker(s, i)
            if name is not None and closeTag(s, textStart, i, end, name):
                textStart = i = end
                continue
        else:
            marker, end, _ = parseStartMarker(s, i)
            if marker is not None:
                textStart = i = openTag(s, textStart, i, end, marker)
                continue
        # Not a usable marker, so it's just text.
        i += 1
    flushText(s, textStart, len(s))
    closeOpenTags(s)


def flushText(s: Stream, start: int, end: int) -> None:
    if end > start:
        s.openTags.current.container.addChild(TextNode(start, end, s.doc))


def rejectMarker(s: Stream, start: int, tagName: str, msg: str) -> bool:
    if s.strict:
        raise StructuralParseError(msg, tagName, start, s.loc(start))
    m.warn(f"{msg} Keeping it as text.", lineNum=s.loc(start))
    return False


def openTag(s: Stream, textStart: int, start: int, end: int, marker: StartMarker) -> int:
    # Returns the index to continue scanning from.
    stack = s.openTags
    tag = marker.tag
    flushText(s, textStart, start)
    if stack.current.policy.implicitClose and stack.current.name == tag.name:
        closeImplicitly(s, stack.pop(), start)
    tag.depth = stack.depth
    stack.current.container.addChild(tag)
    s.doc.offsets.append((start, end - start))
    s.doc.attributeOffsets.extend(marker.attrSpans)
    if marker.policy.rawBody:
        return parseRawBody(s, tag)
    stack.push(tag, marker.policy)
    return end


def closeTag(s: Stream, textStart: int, start: int, end: int, tagName: str) -> bool:
    # Returns whether the closing marker was consumed.
    stack = s.openTags
    index = stack.getDeepestFromTag(tagName)
    if index is None:
        if tagName not in s.registry:
            msg = f"Saw a closing marker [/{tagName}] for an unknown tag."
        else:
            msg = f"Saw a closing marker [/{tagName}], but there's no open tag corresponding to it."
        return rejectMarker(s, start, tagName, msg)
    if stack.blockersAbove(index):
        msg = (
            f"Saw a closing marker [/{tagName}], but there were unclosed tags remaining before the nearest matching opening marker."
            f"\nOpen tags: {', '.join(stack.printOpenTags())}"
        )
        return rejectMarker(s, start, tagName, msg)

    flushText(s, textStart, start)
    while stack.depth > index:
        closeImplicitly(s, stack.pop(), start)
    tag = stack.pop().container
    assert isinstance(tag, TagNode)
    tag.closeBegin = start
    tag.end = end
    s.doc.offsets.append((start, end - start))
    return True


def closeImplicitly(s: Stream, entry: TagStackEntry, position: int) -> None:
    tag = entry.container
    assert isinstance(tag, TagNode)
    tag.end = position
    if not entry.policy.implicitClose:
        m.warn(f"Tag [{tag.name}] was never closed.", lineNum=s.loc(tag.begin))


def closeOpenTags(s: Stream) -> None:
    # Everything still open ends with the input.
    while s.openTags.depth > 0:
        closeImplicitly(s, s.openTags.pop(), len(s))


def parseRawBody(s: Stream, tag: TagNode) -> int:
    # Nested markup isn't recognized; the body runs to the matching closing marker.
    closer = f"[/{tag.name}]"
    _, closeStart, err = s.skipTo(tag.bodyBegin, closer)
    if err:
        m.warn(f"Hit end of input in the middle of a raw [{tag.name}] body.", lineNum=s.loc(tag.begin))
        bodyEnd = len(s)
        tag.end = bodyEnd
    else:
        bodyEnd = closeStart
        tag.closeBegin = closeStart
        tag.end = closeStart + len(closer)
        s.doc.offsets.append((closeStart, len(closer)))
    if bodyEnd > tag.bodyBegin:
        tag.addChild(TextNode(tag.bodyBegin, bodyEnd, s.doc))
    return tag.end


def parseStartMarker(s: Stream, start: int) -> ResultT[StartMarker]:
    if s[start] != "[":
        return Err(start)
    name, i, _ = parseTagName(s, start + 1)
    if name is None:
        return Err(start)
    nameEnd = i

    attrs: dict[str, str] = {}
    attrSpans: list[t.SpanT] = []
    if s[i] == "=":
        # [url=http://example.com]
        span, i, _ = parseAttrValue(s, i + 1)
        if span is None:
            return Err(start)
        attrs[name] = spanText(s, span)
        attrSpans.append(span)
    ok, i, _ = parseAttributeList(s, i, attrs, attrSpans)
    if ok is None or s[i] != "]":
        return Err(start)
    end = i + 1

    policy = s.registry.get(name)
    if policy is None:
        rejectMarker(s, start, name, f"Unknown tag [{name}].")
        return Err(start)
    if i != nameEnd and not policy.attributes:
        # Attribute syntax on a tag that doesn't take attributes is just text.
        return Err(start)

    tag = TagNode(begin=start, end=end, document=s.doc, name=name, bodyBegin=end, attrs=attrs)
    return Ok(StartMarker(tag, policy, attrSpans), end)


def parseEndMarker(s: Stream, start: int) -> ResultT[str]:
    if s.slice(start, start + 2) != "[/":
        return Err(start)
    name, i, _ = parseTagName(s, start + 2)
    if name is None or s[i] != "]":
        return Err(start)
    return Ok(name, i + 1)


def parseTagName(s: Stream, start: int) -> ResultT[str]:
    end = start
    while isTagnameChar(s[end]):
        end += 1
    if end == start:
        return Err(start)
    return Ok(s.slice(start, end), end)


def parseAttributeList(
    s: Stream,
    start: int,
    attrs: dict[str, str],
    attrSpans: list[t.SpanT],
) -> ResultT[bool]:
    # Fills `attrs` and `attrSpans` in place; stops in front of the closing ].
    i = start
    while True:
        ws, i, _ = parseWhitespace(s, i)
        if s.eof(i) or s[i] == "]":
            break
        if ws is None:
            # Attributes have to be separated by whitespace.
            return Err(start)
        attrStart = i
        attr, i, _ = parseAttribute(s, i)
        if attr is None:
            return Err(start)
        attrName, attrValue, span = attr
        if attrName in attrs:
            m.warn(f"Attribute '{attrName}' appears twice in the tag.", lineNum=s.loc(attrStart))
            return Err(start)
        attrs[attrName] = attrValue
        if span is not None:
            attrSpans.append(span)
    return Ok(True, i)


def parseAttribute(s: Stream, start: int) -> ResultT[tuple[str, str, t.SpanT | None]]:
    i = start
    while isAttrNameChar(s[i]):
        i += 1
    if i == start:
        return Err(start)
    attrName = s.slice(start, i)
    if s[i] != "=":
        return Ok((attrName, "", None), i)

    span, i, _ = parseAttrValue(s, i + 1)
    if span is None:
        return Err(start)
    return Ok((attrName, spanText(s, span), span), i)


def parseAttrValue(s: Stream, start: int) -> ResultT[t.SpanT]:
    # Produces the (position, length) of the value, quotes excluded.
    if s[start] in ('"', "'"):
        _, valueEnd, err = s.skipTo(start + 1, s[start])
        if err:
            return Err(start)
        return Ok((start + 1, valueEnd - start - 1), valueEnd + 1)
    i = start
    while not s.eof(i) and s[i] != "]" and not isWhitespace(s[i]):
        i += 1
    if i == start:
        return Err(start)
    return Ok((start, i - start), i)


def parseWhitespace(s: Stream, start: int) -> ResultT[bool]:
    i = start
    while isWhitespace(s[i]):
        i += 1
    if i != start:
        return Ok(True, i)
    else:
        return Err(start)


def spanText(s: Stream, span: t.SpanT) -> str:
    return s.slice(span[0], span[0] + span[1])


def isWhitespace(ch: str) -> bool:
    return ch in (" ", "\t", "\n", "\r", "\f")


def isTagnameChar(ch: str) -> bool:
    return ch != "" and not isWhitespace(ch) and ch not in "[]=/\"'"


def isAttrNameChar(ch: str) -> bool:
    return ch != "" and not isWhitespace(ch) and ch not in "[]=\"'"
