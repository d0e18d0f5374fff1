"""HTTP client for the board REST API.

``BoardApi`` builds requests and maps error responses onto the shared error
taxonomy; the transport only moves JSON over the wire. Every call takes the
bearer token explicitly so the caller decides how tokens are obtained.
"""

import http.client
import json
import urllib.error
import urllib.request
from urllib.parse import quote

from recipeboard import config
from recipeboard.errors import (
    NetworkError,
    RequestTimedOut,
    Unauthenticated,
    error_for_status,
)


def _decode(raw):
    if not raw:
        return None
    try:
        return json.loads(raw.decode())
    except ValueError:
        return {"error": raw.decode(errors="replace")[:200]}


class UrllibTransport:
    def __init__(self, base_url, timeout=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT

    def send(self, method, path, body=None, headers=None):
        data = json.dumps(body).encode() if body is not None else None
        req = urllib.request.Request(
            self.base_url + path,
            data=data,
            method=method,
            headers={"Content-Type": "application/json", **(headers or {})},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return resp.status, _decode(resp.read())
        except urllib.error.HTTPError as exc:
            return exc.code, _decode(exc.read())
        except TimeoutError as exc:
            raise RequestTimedOut(f"{method} {path} timed out after {self.timeout}s") from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise RequestTimedOut(
                    f"{method} {path} timed out after {self.timeout}s"
                ) from exc
            raise NetworkError(f"{method} {path} failed: {exc.reason}") from exc
        # Dropped connections surface unwrapped from getresponse() and read().
        except (OSError, http.client.HTTPException) as exc:
            raise NetworkError(f"{method} {path} failed: {exc!r}") from exc


class BoardApi:
    def __init__(self, transport):
        self.transport = transport

    def _request(self, method, path, token, body=None):
        if not token:
            raise Unauthenticated("Bearer token required")
        status, payload = self.transport.send(
            method, path, body, {"Authorization": f"Bearer {token}"}
        )
        if status >= 400:
            raise error_for_status(status, payload)
        return payload

    # ---- Boards ----

    def get_boards(self, token):
        return self._request("GET", "/api/boards", token)

    def create_board(self, title, token):
        return self._request("POST", "/api/boards", token, {"title": title})

    def update_column_order(self, board_id, columns, token):
        return self._request(
            "PUT", f"/api/boards/{quote(board_id)}/columns", token, {"columns": columns}
        )

    # ---- Columns ----

    def create_column(self, data, token):
        return self._request("POST", "/api/columns", token, data)

    def update_column(self, column_id, data, token):
        return self._request("PUT", f"/api/columns/{quote(column_id)}", token, data)

    def update_card_order(self, column_id, cards, token):
        return self._request(
            "PUT", f"/api/columns/{quote(column_id)}/cards", token, {"cards": cards}
        )

    def delete_column(self, column_id, token):
        return self._request("DELETE", f"/api/columns/{quote(column_id)}", token)

    # ---- Cards ----

    def create_card(self, data, token):
        return self._request("POST", "/api/cards", token, data)

    def update_card(self, card_id, data, token):
        return self._request("PUT", f"/api/cards/{quote(card_id)}", token, data)

    def delete_card(self, card_id, token):
        return self._request("DELETE", f"/api/cards/{quote(card_id)}", token)
