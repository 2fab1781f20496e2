"""
Shared test helpers for request validator tests.
"""

import pytest


class FakeRequest:
    """Request stand-in exposing ``headers`` and an async chunk stream."""

    def __init__(self, chunks=(), content_type=None, headers=None, error=None):
        if headers is None:
            headers = {} if content_type is None else {"content-type": content_type}
        self.headers = headers
        self.chunks = list(chunks)
        self.error = error
        self.chunks_read = 0
        self.closed = False

    async def stream(self):
        try:
            for chunk in self.chunks:
                self.chunks_read += 1
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


@pytest.fixture
def make_request():
    """Factory for fake requests with a body split into chunks."""
    def _make(body=b"", content_type="application/json", chunk_size=None, **kwargs):
        if isinstance(body, str):
            body = body.encode("utf-8")
        if chunk_size:
            chunks = [body[i:i + chunk_size] for i in range(0, len(body), chunk_size)]
        else:
            chunks = [body] if body else []
        return FakeRequest(chunks, content_type=content_type, **kwargs)
    return _make
