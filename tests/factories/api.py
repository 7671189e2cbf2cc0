"""Helpers for calling the HTTP API in tests."""

import json

from httpx import Response
from jose import jwt

TEST_JWT_SECRET = "test-secret"


def make_token(user_id: str, secret: str = TEST_JWT_SECRET) -> str:
    return jwt.encode({"sub": user_id}, secret, algorithm="HS256")


def auth(user_id: str = "user-1") -> dict[str, str]:
    """Authorization header for a signed-in user."""
    return {"Authorization": f"Bearer {make_token(user_id)}"}


def sse_events(response: Response) -> list[dict]:
    """Decode the data payloads of an SSE response."""
    return [
        json.loads(line[len("data: "):])
        for line in response.iter_lines()
        if line.startswith("data: ")
    ]
