"""
minihttpd: a minimal multi-threaded HTTP/1.1 server.

    from minihttpd import ServerConfig, create_app

    server = create_app(ServerConfig(directory="/tmp/data"))
    server.run()

Routes: /, /echo/<text>, /files/<name>, /user-agent.
"""

__version__ = "1.0.0"

from .server import HTTPServer, create_app
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "create_app", "__version__"]
