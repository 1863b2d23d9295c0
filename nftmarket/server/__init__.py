"""HTTP API for the marketplace node."""

from nftmarket.server.server import HTTPServer

__all__ = ["HTTPServer"]
