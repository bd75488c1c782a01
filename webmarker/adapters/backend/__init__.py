"""HTTP adapter for the persistence backend."""

from webmarker.adapters.backend.client import BackendClient, retry_with_backoff

__all__ = ["BackendClient", "retry_with_backoff"]
