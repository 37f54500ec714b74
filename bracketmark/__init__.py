# pylint: disable=wrong-import-position

from __future__ import annotations

import os
import platform
import sys


def verify_python_version() -> None:
    if sys.version_info < (3, 9):
        print(
            """bracketmark requires Python 3.9 or higher; you are on {}.""".format(
                platform.python_version(),
            ),
        )
        sys.exit(1)


verify_python_version()


def _readSemver() -> str:
    try:
        with open(os.path.join(os.path.dirname(os.path.realpath(__file__)), "semver.txt"), encoding="utf-8") as fh:
            return fh.read().strip()
    except FileNotFoundError:
        return "???"


__version__ = _readSemver()

from . import messages
from .config import TagPolicy, TagRegistry, defaultRegistry
from .document import Document, Node, TagNode, TextNode, debugNode, debugTree
from .errors import BracketmarkError, MissingRendererError, RenderError, StructuralParseError, TransformError
from .htmltext import htmlText, plainText
from .offsets import Offsets
from .parser import parse
from .renderers import TemplateRenderer, renderersFromTemplates
from .transformer import TransformResult, transform
