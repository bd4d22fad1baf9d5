"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Creates the listening socket, binds, listens                     │
    │  • Runs the accept() loop on the calling thread                     │
    │  • SIGTERM / SIGINT trigger a graceful shutdown                     │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ hands off new connections
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  • Fixed number of worker threads                                   │
    │  • Bounded task queue; full queue → caller answers 503              │
    └─────────────────────────────────────────────────────────────────────┘
                                    │ worker processes the connection
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Reads one request in buffer_size chunks                          │
    │  • Writes the response with sendall(), then closes                  │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestTooLargeError
from .thread_pool import ThreadPool, Task, Worker, WorkerState

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestTooLargeError",
    "ThreadPool",
    "Task",
    "Worker",
    "WorkerState",
]
