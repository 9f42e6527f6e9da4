"""Resource namespaces for the client."""

from .chat import Chat
from .responses import Responses

__all__ = [
    "Chat",
    "Responses",
]
