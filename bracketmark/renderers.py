from __future__ import annotations

import jinja2

from . import t

# A renderer is any callable taking the tag's already-rendered body
# and its attributes, and returning the text that replaces the whole tag:
#
#     def bold(body: str, attrs: dict[str, str]) -> str:
#         return f"<strong>{body}</strong>"
#
# Renderers are looked up by the tag's exact name. Tags with no renderer
# go to the `fallback` given to transform(), which also receives the name:
#
#     def anyTag(tagName: str, body: str, attrs: dict[str, str]) -> str:
#         return f"<span class={tagName}>{body}</span>"


def templateEnvironment() -> jinja2.Environment:
    # Bodies arrive already rendered, so templates mustn't escape them again.
    return jinja2.Environment(autoescape=False, undefined=jinja2.StrictUndefined)


class TemplateRenderer:
    """
    Renders a tag through a Jinja2 template.

    The template sees `tag` (the tag's name), `body` (the rendered children),
    `attributes` (the tag's attributes, in source order) and `attribute`
    (the `[tag=value]` form, or None).

    Called with (body, attrs), it renders the tag it was registered for.
    `render(tagName, body, attrs)` renders any tag, so it can serve as
    a fallback.
    """

    def __init__(self, source: str, name: str | None = None, env: jinja2.Environment | None = None) -> None:
        self.name = name
        self.env = env if env is not None else templateEnvironment()
        self.template = self.env.from_string(source)

    def __call__(self, body: str, attrs: t.Mapping[str, str]) -> str:
        if self.name is None:
            msg = "A TemplateRenderer without a tag name can only be used through render()."
            raise TypeError(msg)
        return self.render(self.name, body, attrs)

    def render(self, tagName: str, body: str, attrs: t.Mapping[str, str]) -> str:
        return self.template.render(
            tag=tagName,
            body=body,
            attributes=dict(attrs),
            attribute=attrs.get(tagName),
        )

    def __repr__(self) -> str:
        return f"TemplateRenderer({self.name!r})"


def renderersFromTemplates(templates: t.Mapping[str, str]) -> dict[str, TemplateRenderer]:
    env = templateEnvironment()
    return {name: TemplateRenderer(source, name, env=env) for name, source in templates.items()}
