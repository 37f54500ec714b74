from __future__ import annotations

import re

from . import t

if t.TYPE_CHECKING:
    from .config import TagPolicy
    from .offsets import Offsets

# Text functions render a single text node. They receive the node's text,
# where it starts in the source, the policy of the enclosing tag,
# and the ledger to record any change in length into.

ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
}
LINE_BREAK = "<br>"

ESCAPE_RE = re.compile(r'[&<>"]')
ESCAPE_AND_BREAK_RE = re.compile(r'[&<>"]|\r\n?|\n')


def htmlText(text: str, begin: int, policy: TagPolicy, offsets: Offsets) -> str:
    pattern = ESCAPE_AND_BREAK_RE if policy.newlines else ESCAPE_RE

    def replacer(match: re.Match) -> str:
        original = match.group(0)
        replacement = ESCAPES.get(original, LINE_BREAK)
        offsets.add(begin + match.start(), len(replacement) - len(original))
        return replacement

    return pattern.sub(replacer, text)


def plainText(text: str, begin: int, policy: TagPolicy, offsets: Offsets) -> str:
    return text
