"""Shared helpers for API tests."""

from linkshelf.config import settings


def session_cookie(token: str) -> dict:
    return {"Cookie": f"{settings.session_cookie_name}={token}"}


async def register_and_login(client, username: str, password: str) -> str:
    """Create an account through the API and return a session token."""
    r = await client.post(
        "/api/auth/register", json={"username": username, "password": password}
    )
    assert r.status_code == 200, r.text
    r = await client.post(
        "/api/auth/login", json={"username": username, "password": password}
    )
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return r.json()["data"]["token"]
