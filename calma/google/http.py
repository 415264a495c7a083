import httpx

TIMEOUT_SEC = 10.0


def client() -> httpx.AsyncClient:
    """HTTP client for Google APIs. Tests replace this to inject a mock transport."""
    return httpx.AsyncClient(timeout=TIMEOUT_SEC)
