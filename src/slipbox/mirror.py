"""Mirror notes to GitHub gists.

Mirroring is a side effect: the notebook calls it after the real write has
been handed to the store and ignores any MirrorError it raises.
"""

from __future__ import annotations

from typing import Any

import httpx

from .config import GIST_API_URL, MIRROR_TIMEOUT_SECONDS, get_github_token
from .errors import ErrorCode, SlipboxError
from .models import Note
from .note_id import basename


class MirrorError(SlipboxError):
    """A gist request failed (network, auth, or unexpected response)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        details = {"status_code": status_code} if status_code is not None else None
        super().__init__(ErrorCode.MIRROR_FAILED, message, details)
        self.status_code = status_code


def _join_base(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


def gist_payload(note: Note) -> dict[str, Any]:
    """Request body describing a note as a single-file gist."""
    return {
        "description": note.title,
        "public": not note.frontmatter.is_private,
        "files": {f"{basename(note.id)}.md": {"content": note.content}},
    }


class GistMirror:
    """Create, update and delete gists mirroring notes."""

    def __init__(
        self,
        token: str,
        *,
        base_url: str = GIST_API_URL,
        timeout_s: float = MIRROR_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._token = token
        self._transport = transport

    @classmethod
    def from_config(cls) -> GistMirror | None:
        """Mirror configured from the environment, or None when no token is set."""
        token = get_github_token()
        return cls(token) if token else None

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
        }
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                resp = client.request(method, _join_base(self.base_url, path), headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise MirrorError(f"gist request failed: {e}") from e

        if resp.status_code >= 400:
            raise MirrorError(f"gist API returned HTTP {resp.status_code}", resp.status_code)
        return resp

    def create(self, note: Note) -> str:
        """Create a gist for note and return its id."""
        resp = self._request("POST", "/gists", gist_payload(note))
        try:
            gist_id = resp.json()["id"]
        except (ValueError, KeyError, TypeError) as e:
            raise MirrorError("gist API returned an unexpected response") from e
        return str(gist_id)

    def update(self, gist_id: str, note: Note) -> None:
        payload = gist_payload(note)
        # Visibility of an existing gist cannot be changed
        payload.pop("public")
        self._request("PATCH", f"/gists/{gist_id}", payload)

    def delete(self, gist_id: str) -> None:
        self._request("DELETE", f"/gists/{gist_id}")
