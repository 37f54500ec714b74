from __future__ import annotations

import functools
from dataclasses import dataclass, field

from . import messages as m
from . import t
from .config import TagPolicy, TagRegistry, defaultRegistry
from .document import Document, TagNode, TextNode
from .errors import MissingRendererError, RenderError
from .htmltext import htmlText
from .offsets import Offsets


class TransformResult(t.NamedTuple):
    text: str
    offsets: Offsets


@dataclass
class TransformContext:
    doc: Document
    predicate: t.PredicateT
    renderers: t.Mapping[str, t.RendererT]
    registry: TagRegistry
    strict: bool
    textFunction: t.TextFunctionT
    fallback: t.FallbackT | None = None
    # Fresh per call; a Document may be transformed by several callers at once.
    offsets: Offsets = field(default_factory=Offsets)


def transform(
    doc: Document,
    predicate: t.PredicateT,
    renderers: t.Mapping[str, t.RendererT],
    registry: TagRegistry | None = None,
    strict: bool = False,
    textFunction: t.TextFunctionT = htmlText,
    fallback: t.FallbackT | None = None,
) -> TransformResult:
    """
    Renders a parsed Document.

    Tags the predicate rejects are copied through from the source unchanged,
    descendants included. Accepted tags are rendered by the renderer
    registered for their exact name, given their rendered body. Tags with no
    renderer go to `fallback` if one is given, along with their name.
    Text goes through `textFunction`, which records every change in length
    into the returned Offsets, keyed by source position.

    In strict mode, an accepted tag with no renderer raises MissingRendererError;
    otherwise it's copied through like a rejected tag.
    A renderer that fails always raises RenderError.
    """
    ctx = TransformContext(
        doc=doc,
        predicate=predicate,
        renderers=renderers,
        registry=registry if registry is not None else defaultRegistry(),
        strict=strict,
        textFunction=textFunction,
        fallback=fallback,
    )
    text = transformNodes(ctx, doc.children, ctx.registry.policyFor(None))
    return TransformResult(text, ctx.offsets)


def transformNodes(ctx: TransformContext, nodes: t.Iterable[t.NodeT], policy: TagPolicy) -> str:
    return "".join(transformNode(ctx, node, policy) for node in nodes)


def transformNode(ctx: TransformContext, node: t.NodeT, policy: TagPolicy) -> str:
    if isinstance(node, TextNode):
        return ctx.textFunction(node.sourceText, node.begin, policy, ctx.offsets)
    elif isinstance(node, TagNode):
        return transformTag(ctx, node)
    else:
        t.assert_never(node)


def transformTag(ctx: TransformContext, tag: TagNode) -> str:
    if not ctx.predicate(tag):
        # Rejection covers the whole subtree, whatever the predicate says about descendants.
        return tag.sourceText

    renderer = findRenderer(ctx, tag)
    if renderer is None:
        return tag.sourceText

    body = transformNodes(ctx, tag.children, ctx.registry.policyFor(tag.name))
    try:
        return renderer(body, tag.attrs)
    except Exception as e:
        raise RenderError(tag.name, str(e) or type(e).__name__) from e


def findRenderer(ctx: TransformContext, tag: TagNode) -> t.RendererT | None:
    # Looked up before rendering the body, so a tag copied through verbatim
    # leaves no edits behind in the ledger.
    renderer = ctx.renderers.get(tag.name)
    if renderer is None and ctx.fallback is not None:
        renderer = functools.partial(ctx.fallback, tag.name)
    if renderer is None:
        if ctx.strict:
            raise MissingRendererError(tag.name)
        m.warn(f"No renderer found for tag [{tag.name}]; copying it through unchanged.", lineNum=ctx.doc.loc(tag.begin))
    return renderer
