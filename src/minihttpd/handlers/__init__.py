"""
Route handlers.

- echo: root path, /echo/<text>, /user-agent
- files: /files/<name> read and write under the base directory
"""

from .echo import echo, index, user_agent
from .files import FileHandler, PathTraversalError

__all__ = [
    "index",
    "echo",
    "user_agent",
    "FileHandler",
    "PathTraversalError",
]
