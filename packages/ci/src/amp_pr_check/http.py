from __future__ import annotations

import httpx

USER_AGENT = "amp-pr-check/0.1"


def make_http_client(
    *,
    timeout: httpx.Timeout | None = None,
    follow_redirects: bool = True,
    user_agent: str = USER_AGENT,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    t = timeout or httpx.Timeout(connect=10.0, read=60.0, write=60.0, pool=10.0)
    return httpx.Client(
        timeout=t,
        follow_redirects=follow_redirects,
        headers={"User-Agent": user_agent},
        transport=transport,
    )


def body_snippet(response: httpx.Response, limit: int = 200) -> str:
    try:
        text = response.text
    except UnicodeDecodeError:
        return ""
    text = " ".join(text.split())
    return text[:limit]
