"""Pure domain utilities: response payload builders.

Free of FastAPI/HTTP concerns so they can be unit-tested and reused by both
the server and the smoke runner.
"""
__all__ = ["payloads"]
