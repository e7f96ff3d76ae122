"""Network transport for talking to sync endpoints."""

from .http_client import HttpResponse, HttpTransport, HttpxTransport

__all__ = ["HttpResponse", "HttpTransport", "HttpxTransport"]
