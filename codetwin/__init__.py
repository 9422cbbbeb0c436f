"""CodeTwin: call-graph diagrams from language-server symbol and call-hierarchy facts."""

from .dot import DotStyle, generate_dot_source
from .errors import CodeTwinError, PolicyError, UnknownLanguageError
from .generator import GraphGenerator
from .languages import Language, get_language

__version__ = "0.3.0"

__all__ = [
    "CodeTwinError",
    "DotStyle",
    "GraphGenerator",
    "Language",
    "PolicyError",
    "UnknownLanguageError",
    "__version__",
    "generate_dot_source",
    "get_language",
]
