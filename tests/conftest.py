import pytest

from bracketmark import messages as m
from bracketmark import renderersFromTemplates

TEMPLATES = {
    "a": "<aaaaaa>{{ body }}</aaaaaa>",
    "b": "<bbbbbb>{{ body }}</bbbbbb>",
    "c": "<cccccc>{{ body }}</cccccc>",
    "d": '<dddddd{% for k, v in attributes.items() %} {{ k }}="{{ v }}"{% endfor %}>{{ body }}</dddddd>',
    "*": "<li>{{ body }}</li>",
    "nobody": "<p>no body here</p>",
    "list": "<ul>{{ body }}</ul>",
    "change": "<change>{{ body|replace('', '|') }}</change>",
    "wrap": "<wrap>left{{ body }}right</wrap>",
    "bad": "<wrap>left{{ body.missing_method() }}right</wrap>",
    "url": '<a href="{{ attribute }}">{{ body }}</a>',
    "code": "<pre>{{ body }}</pre>",
}


@pytest.fixture(autouse=True)
def quietMessages():
    with m.messagesSilent():
        yield


@pytest.fixture(scope="session")
def renderers():
    return renderersFromTemplates(TEMPLATES)


@pytest.fixture(params=[True, False], ids=["strict", "lenient"])
def strict(request):
    return request.param
