# wms_grading/utils/http.py
import httpx
from typing import Optional

def make_client(timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=timeout,
        transport=transport,
        follow_redirects=True,
        headers={"Accept": "application/json"},
    )

async def get_json(client: httpx.AsyncClient, url: str, params: Optional[dict] = None, headers: Optional[dict] = None):
    r = await client.get(url, params=params, headers=headers)
    r.raise_for_status()
    return r.json()
