"""Request dispatchers for the proxy ingress."""

from .proxy_dispatcher import HttpxProxyDispatcher

__all__ = [
    "HttpxProxyDispatcher",
]
