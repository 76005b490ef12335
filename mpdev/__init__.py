"""
mpdev - Declarative resource apply engine.

Registers typed resource definitions, resolves references between them and
applies them by invoking external tools (zip, gsutil, docker).
"""

__version__ = "0.1.0"


__all__ = ["Registry", "load_config", "load_resources"]

from .config import load_config
from .loader import load_resources
from .registry import Registry
