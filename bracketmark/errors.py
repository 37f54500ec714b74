from __future__ import annotations


class BracketmarkError(Exception):
    pass


class StructuralParseError(BracketmarkError):
    # Unknown tag name, or a closing marker with nothing to close, in strict mode.
    def __init__(self, msg: str, tagName: str, position: int, loc: str | None = None) -> None:
        self.tagName = tagName
        self.position = position
        self.loc = loc
        if loc is not None:
            msg = f"{msg} (at {loc})"
        super().__init__(msg)


class TransformError(BracketmarkError):
    def __init__(self, msg: str, tagName: str) -> None:
        self.tagName = tagName
        super().__init__(msg)


class MissingRendererError(TransformError):
    def __init__(self, tagName: str) -> None:
        super().__init__(f"No renderer found for tag [{tagName}]", tagName)


class RenderError(TransformError):
    # Always chained to the renderer's own exception.
    def __init__(self, tagName: str, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Rendering failed for tag [{tagName}]: {reason}", tagName)
