from .highlighter import ResultHighlighter
from .types import Highlight

__all__ = [
    "Highlight",
    "ResultHighlighter",
]
