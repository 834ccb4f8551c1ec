# relgraph/core/__init__.py

from .config import get_settings, Settings
from .exceptions import GraphServiceError

__all__ = [
    "get_settings",
    "Settings",
    "GraphServiceError",
]
