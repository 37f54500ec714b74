from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from . import t


@dataclass(frozen=True)
class TagPolicy:
    # Closed by a same-name sibling, the parent's closing marker, or end of input.
    implicitClose: bool = False
    # Body is captured verbatim up to the matching closing marker.
    rawBody: bool = False
    # `name=value` syntax is recognized inside the opening marker.
    attributes: bool = True
    # Text functions turn newlines in the body into explicit line breaks.
    newlines: bool = True

    @staticmethod
    def fromJson(data: t.Mapping[str, t.Any]) -> TagPolicy:
        fieldNames = {f.name for f in dataclasses.fields(TagPolicy)}
        unknown = set(data) - fieldNames
        if unknown:
            msg = f"Unknown tag policy flags: {', '.join(sorted(unknown))}"
            raise ValueError(msg)
        return TagPolicy(**{k: bool(v) for k, v in data.items()})


@dataclass
class TagRegistry:
    policies: dict[str, TagPolicy] = field(default_factory=dict)
    # Applied to any name not in `policies`.
    # With no default, unregistered names are unknown tags.
    default: TagPolicy | None = field(default_factory=TagPolicy)

    def __contains__(self, tagName: str) -> bool:
        return tagName in self.policies or self.default is not None

    def get(self, tagName: str) -> TagPolicy | None:
        return self.policies.get(tagName, self.default)

    def policyFor(self, tagName: str | None) -> TagPolicy:
        # Never fails; used at render time, where unknown names
        # fall back to the plain defaults.
        if tagName is None:
            return self.default or TagPolicy()
        return self.get(tagName) or TagPolicy()

    def register(self, tagName: str, policy: TagPolicy) -> TagRegistry:
        self.policies[tagName] = policy
        return self

    def clone(self, **kwargs: t.Any) -> TagRegistry:
        kwargs.setdefault("policies", dict(self.policies))
        return dataclasses.replace(self, **kwargs)

    @staticmethod
    def fromJson(data: t.Mapping[str, t.Any], default: TagPolicy | None = None) -> TagRegistry:
        # {"code": {"rawBody": true}, "*": {"implicitClose": true}}
        return TagRegistry(
            policies={name: TagPolicy.fromJson(flags) for name, flags in data.items()},
            default=default if default is not None else TagPolicy(),
        )


def defaultRegistry() -> TagRegistry:
    # The usual BBCode set: literal blocks and list items.
    return TagRegistry(
        policies={
            "code": TagPolicy(rawBody=True),
            "noparse": TagPolicy(rawBody=True),
            "*": TagPolicy(implicitClose=True),
        },
    )

