import logging

import httpx

from merkledag.models.errors import ObjectNotFound, StoreReadError, StoreWriteError

__all__ = ["HttpStore"]

logger = logging.getLogger(__name__)


class HttpStore:
    """A store served over HTTP.

    Objects live at ``{base_url}/objects/<hex>``: ``HEAD`` checks existence,
    ``GET`` fetches the value and ``PUT`` uploads it. A 404 means the object
    is absent; any other failure is a store error.
    """

    def __init__(self, base_url: str, http_client: httpx.Client = None):
        self.base_url = str(base_url).rstrip("/")
        self.http_client = http_client or httpx.Client()

    def __enter__(self):
        self.http_client.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.http_client.__exit__(exc_type, exc_val, exc_tb)

    def close(self):
        self.http_client.close()

    def object_url(self, key: bytes) -> str:
        return f"{self.base_url}/objects/{key.hex()}"

    def has(self, key: bytes) -> bool:
        try:
            response = self.http_client.head(self.object_url(key))
            if response.status_code == httpx.codes.NOT_FOUND:
                return False
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreReadError(f"Cannot check object {key.hex()}: {e}", key=key) from e
        return True

    def get(self, key: bytes) -> bytes:
        try:
            response = self.http_client.get(self.object_url(key))
            if response.status_code == httpx.codes.NOT_FOUND:
                raise ObjectNotFound(f"Object not found: {key.hex()}", key=key)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreReadError(f"Cannot fetch object {key.hex()}: {e}", key=key) from e
        return response.content

    def put(self, key: bytes, value: bytes) -> None:
        headers = {"Content-Type": "application/octet-stream"}
        try:
            response = self.http_client.put(
                self.object_url(key),
                content=value,
                headers=headers,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreWriteError(f"Cannot upload object {key.hex()}: {e}", key=key) from e
        logger.debug("Uploaded object %s (%d bytes)", key.hex()[:8], len(value))
