import io

import pytest

from bracketmark import (
    MissingRendererError,
    Offsets,
    RenderError,
    TagPolicy,
    TagRegistry,
    TemplateRenderer,
    TransformError,
    defaultRegistry,
    parse,
    plainText,
    transform,
)
from bracketmark import messages as m


def acceptAll(tag):
    return True


def assertTransform(strict, source, predicate, renderers, expected, expectedOffsets=None, registry=None):
    doc = parse(source, defaultRegistry())
    text, offsets = transform(doc, predicate, renderers, registry=registry, strict=strict)
    assert text == expected
    assert offsets == (expectedOffsets if expectedOffsets is not None else Offsets())


def test_escape_html_with_offsets(strict, renderers):
    source = 'A<>B&C<>D [b] f(x) = x < y > z &\r\n f(y) = "Yo!"\n [/b] A<>B&C<>D'
    expected = (
        "A&lt;&gt;B&amp;C&lt;&gt;D <bbbbbb> f(x) = x &lt; y &gt; z &amp;<br> f(y) = &quot;Yo!&quot;<br> </bbbbbb>"
        " A&lt;&gt;B&amp;C&lt;&gt;D"
    )
    expectedOffsets = Offsets()
    for position, delta in [
        (1, 3),  # <
        (2, 3),  # >
        (4, 4),  # &
        (6, 3),  # <
        (7, 3),  # >
        (23, 3),  # <
        (27, 3),  # >
        (31, 4),  # &
        (32, 2),  # \r\n
        (42, 5),  # "
        (46, 5),  # "
        (47, 3),  # \n
        (55, 3),  # <
        (56, 3),  # >
        (58, 4),  # &
        (60, 3),  # <
        (61, 3),  # >
    ]:
        expectedOffsets.add(position, delta)
    assertTransform(strict, source, acceptAll, renderers, expected, expectedOffsets)


def test_nested_nodes_not_transformed_if_parent_fails_predicate(strict, renderers):
    source = "[list] [*] foo [*] bar [/list]"
    assertTransform(strict, source, lambda tag: tag.name != "list", renderers, source)


def test_rejection_is_inherited_even_when_children_contain_escapes(strict, renderers):
    source = "x<[b]1 < 2 [a]&[/a][/b]"
    assertTransform(
        strict,
        source,
        lambda tag: tag.name != "b",
        renderers,
        "x&lt;[b]1 < 2 [a]&[/a][/b]",
        expectedOffsets=offsetsFrom((1, 3)),
    )


def test_prefix_and_suffix(strict, renderers):
    assertTransform(strict, "abc[b] bbb [/b]123", acceptAll, renderers, "abc<bbbbbb> bbb </bbbbbb>123")


def test_simple_offsets(strict, renderers):
    assertTransform(
        strict,
        "1[a]2[b]3[/b]4[/a]5",
        acceptAll,
        renderers,
        "1<aaaaaa>2<bbbbbb>3</bbbbbb>4</aaaaaa>5",
    )


def test_solo_attributes(strict, renderers):
    assertTransform(strict, "[d testattr=33]xyz[/d]", acceptAll, renderers, '<dddddd testattr="33">xyz</dddddd>')


def test_tag_equals_attribute(strict, renderers):
    assertTransform(
        strict,
        "[url=http://example.com]home[/url]",
        acceptAll,
        renderers,
        '<a href="http://example.com">home</a>',
    )


def test_template_changes_body(strict, renderers):
    assertTransform(strict, "[change] foo [/change]", acceptAll, renderers, "<change>| |f|o|o| |</change>")


def test_template_wraps_body(strict, renderers):
    assertTransform(strict, "[wrap] foo [/wrap]", acceptAll, renderers, "<wrap>left foo right</wrap>")


def test_template_ignores_body(strict, renderers):
    assertTransform(strict, "[nobody] a<b [/nobody]", acceptAll, renderers, "<p>no body here</p>", offsetsFrom((10, 3)))


def test_transformed_result(strict, renderers):
    assertTransform(strict, "[b] bbb [/b]", acceptAll, renderers, "<bbbbbb> bbb </bbbbbb>")


def test_with_embedding(strict, renderers):
    assertTransform(strict, "[a]123[c]xyz[/c][/a]", acceptAll, renderers, "<aaaaaa>123<cccccc>xyz</cccccc></aaaaaa>")


def test_with_embedding_and_adjacent_tags(strict, renderers):
    assertTransform(
        strict,
        "123[b]abc[/b] [a]123[c]xyz[/c][/a] 456",
        acceptAll,
        renderers,
        "123<bbbbbb>abc</bbbbbb> <aaaaaa>123<cccccc>xyz</cccccc></aaaaaa> 456",
    )


def test_with_embedding_and_adjacent_tags_and_attributes(strict, renderers):
    assertTransform(
        strict,
        "123[b]abc[/b] [a]123[d testattr=33]xyz[/d][/a] 456",
        acceptAll,
        renderers,
        '123<bbbbbb>abc</bbbbbb> <aaaaaa>123<dddddd testattr="33">xyz</dddddd></aaaaaa> 456',
    )


def test_with_list_item_tag(strict, renderers):
    assertTransform(
        strict,
        "123[list]abc[*][/list] [a]123[d testattr=33]xyz[/d][/a] 456",
        acceptAll,
        renderers,
        '123<ul>abc<li></li></ul> <aaaaaa>123<dddddd testattr="33">xyz</dddddd></aaaaaa> 456',
    )


def test_with_list_item_tag_inside_rejected_tag(strict, renderers):
    assertTransform(
        strict,
        "123[b]abc[*][/b] [a]123[d testattr=33]xyz[/d][/a] 456",
        lambda tag: tag.name != "b",
        renderers,
        '123[b]abc[*][/b] <aaaaaa>123<dddddd testattr="33">xyz</dddddd></aaaaaa> 456',
    )


def test_with_embedding_no_leading_text_node(strict, renderers):
    assertTransform(
        strict,
        "[list][*]item1[*]item2[/list]",
        acceptAll,
        renderers,
        "<ul><li>item1</li><li>item2</li></ul>",
    )


def test_with_embedding_newline_transform_disabled(strict, renderers):
    registry = TagRegistry(
        policies={
            "list": TagPolicy(implicitClose=False, rawBody=False, attributes=False, newlines=False),
            "*": TagPolicy(implicitClose=False, rawBody=False, attributes=False, newlines=False),
        },
    )
    assertTransform(
        strict,
        "[list]\n\t[*]item1\n\t[*]item2\n[/list]",
        acceptAll,
        renderers,
        "<ul>\n\t<li>item1\n\t</li><li>item2\n</li></ul>",
        registry=registry,
    )


def test_newlines_converted_by_default(strict, renderers):
    assertTransform(
        strict,
        "[list]\n[*]a\r\n[/list]",
        acceptAll,
        renderers,
        "<ul><br><li>a<br></li></ul>",
        offsetsFrom((6, 3), (11, 2)),
    )


def test_with_many_embeddings_and_adjacent_tags(strict, renderers):
    assertTransform(
        strict,
        "123[b]abc[a][c]wow[/c][/a][/b] [a]123[c]xyz[/c][/a] 456",
        acceptAll,
        renderers,
        "123<bbbbbb>abc<aaaaaa><cccccc>wow</cccccc></aaaaaa></bbbbbb> <aaaaaa>123<cccccc>xyz</cccccc></aaaaaa> 456",
    )


def test_raw_body_is_escaped_not_parsed(strict, renderers):
    assertTransform(
        strict,
        "[code][b]x[/b][/code]",
        acceptAll,
        renderers,
        "<pre>[b]x[/b]</pre>",
    )
    assertTransform(
        strict,
        "[code]a<b[/code]",
        acceptAll,
        renderers,
        "<pre>a&lt;b</pre>",
        offsetsFrom((7, 3)),
    )


def test_predicate_sees_depth(strict, renderers):
    # Only top-level tags get rendered.
    assertTransform(
        strict,
        "[a]1[b]2[/b][/a]",
        lambda tag: tag.depth == 0,
        renderers,
        "<aaaaaa>1[b]2[/b]</aaaaaa>",
    )


def test_error_bad_template(strict, renderers):
    doc = parse("[bad testattr=33]xyz[/bad]")
    with pytest.raises(RenderError) as excinfo:
        transform(doc, acceptAll, renderers, strict=strict)
    assert excinfo.value.tagName == "bad"
    assert str(excinfo.value).startswith("Rendering failed for tag [bad]")
    assert excinfo.value.__cause__ is not None


def test_error_from_plain_renderer(strict):
    def explode(body, attrs):
        raise ValueError("no thanks")

    doc = parse("[a][b]x[/b][/a]")
    with pytest.raises(RenderError, match=r"\[b\]: no thanks"):
        transform(doc, acceptAll, {"a": lambda body, attrs: body, "b": explode}, strict=strict)


def test_error_strict_missing_tag(renderers):
    doc = parse("[missing testattr=33]xyz[/missing]")
    with pytest.raises(MissingRendererError) as excinfo:
        transform(doc, acceptAll, renderers, strict=True)
    assert str(excinfo.value) == "No renderer found for tag [missing]"
    assert excinfo.value.tagName == "missing"
    assert isinstance(excinfo.value, TransformError)


def test_lenient_missing_tag_copied_through(renderers):
    source = "x&[missing testattr=33]a<b[/missing] [b]&[/b]"
    doc = parse(source)
    with m.withMessageState(io.StringIO()) as fh:
        text, offsets = transform(doc, acceptAll, renderers, strict=False)
    assert text == "x&amp;[missing testattr=33]a<b[/missing] <bbbbbb>&amp;</bbbbbb>"
    # Nothing is recorded for the copied-through tag's body.
    assert offsets == offsetsFrom((1, 4), (40, 4))
    assert "No renderer found for tag [missing]" in fh.getvalue()


def test_missing_tag_next_to_list_items(strict, renderers):
    # A renderer for [*] list items is not a catch-all for other tags.
    doc = parse("[list][*]a[/list][missing]xyz[/missing]")
    if strict:
        with pytest.raises(MissingRendererError, match=r"\[missing\]"):
            transform(doc, acceptAll, renderers, strict=True)
    else:
        text, offsets = transform(doc, acceptAll, renderers, strict=False)
        assert text == "<ul><li>a</li></ul>[missing]xyz[/missing]"
        assert not offsets


def test_fallback_renderer(strict, renderers):
    fallback = TemplateRenderer('<span class="{{ tag }}">{{ body }}</span>')
    doc = parse("[unheard]x&y[/unheard] [*]item")
    text, offsets = transform(doc, acceptAll, renderers, strict=strict, fallback=fallback.render)
    assert text == '<span class="unheard">x&amp;y</span> <li>item</li>'
    assert offsets == offsetsFrom((10, 4))


def test_fallback_sees_tag_attribute(renderers):
    fallback = TemplateRenderer('<a class="{{ tag }}" href="{{ attribute }}">{{ body }}</a>')
    doc = parse("[link=http://example.com]home[/link]")
    text, _ = transform(doc, acceptAll, renderers, strict=True, fallback=fallback.render)
    assert text == '<a class="link" href="http://example.com">home</a>'


def test_plain_fallback_receives_tag_name(strict):
    def fallback(tagName, body, attrs):
        return f"<{tagName}{''.join(f' {k}={v}' for k, v in attrs.items())}>{body}</{tagName}>"

    doc = parse("[q cite=x]hi[/q]")
    text, _ = transform(doc, acceptAll, {}, strict=strict, fallback=fallback)
    assert text == "<q cite=x>hi</q>"


def test_fallback_failure_is_render_error(strict, renderers):
    fallback = TemplateRenderer("{{ nothing_here }}")
    with pytest.raises(RenderError, match=r"\[unheard\]"):
        transform(parse("[unheard]x[/unheard]"), acceptAll, renderers, strict=strict, fallback=fallback.render)


def test_template_without_name_needs_render():
    with pytest.raises(TypeError):
        TemplateRenderer("{{ body }}")("x", {})


def test_default_registry_is_not_shared(renderers):
    registry = defaultRegistry()
    registry.register("b", TagPolicy(rawBody=True))
    text, _ = transform(parse("[b][a]x[/a][/b]"), acceptAll, renderers)
    assert text == "<bbbbbb><aaaaaa>x</aaaaaa></bbbbbb>"


def test_missing_renderer_warning_location():
    doc = parse("line one\n  [missing]x[/missing]")
    with m.withMessageState(io.StringIO()) as fh:
        transform(doc, acceptAll, {}, strict=False)
    assert fh.getvalue() == "LINE 2:3: No renderer found for tag [missing]; copying it through unchanged.\n"


def test_plain_text_function(strict, renderers):
    doc = parse("a<b [b]&[/b]")
    text, offsets = transform(doc, acceptAll, renderers, strict=strict, textFunction=plainText)
    assert text == "a<b <bbbbbb>&</bbbbbb>"
    assert not offsets


def test_document_can_be_transformed_twice(renderers):
    doc = parse("a<b [b]c[/b]")
    first = transform(doc, acceptAll, renderers)
    second = transform(doc, lambda tag: False, renderers)
    assert first.text == "a&lt;b <bbbbbb>c</bbbbbb>"
    assert second.text == "a&lt;b [b]c[/b]"
    assert first.offsets == second.offsets == offsetsFrom((1, 3))
    assert first.offsets is not second.offsets


def test_offsets_map_source_to_output(renderers):
    source = "<<x"
    text, offsets = transform(parse(source), acceptAll, renderers)
    assert text == "&lt;&lt;x"
    assert text[offsets.sourceToOutput(2)] == "x"


def offsetsFrom(*additions):
    offsets = Offsets()
    for position, delta in additions:
        offsets.add(position, delta)
    return offsets
