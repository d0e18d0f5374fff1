import base64

import pytest

from recipeboard.app import create_app
from recipeboard.auth import create_token
from recipeboard.memory import MemoryStore

SECRET = "test-secret-key-for-signing-bearer-tokens"
WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"recipeboard-webhook-signing-key").decode()
ALICE = "user_alice"
BOB = "user_bob"


def bearer(user_id):
    return {"Authorization": f"Bearer {create_token(user_id, SECRET)}"}


class BoardClient:
    """Thin wrapper around the Flask test client acting as one user."""

    def __init__(self, client, user_id):
        self.client = client
        self.user_id = user_id
        self.headers = bearer(user_id)

    def get(self, path):
        return self.client.get(path, headers=self.headers)

    def post(self, path, json):
        return self.client.post(path, json=json, headers=self.headers)

    def put(self, path, json):
        return self.client.put(path, json=json, headers=self.headers)

    def delete(self, path):
        return self.client.delete(path, headers=self.headers)

    def boards(self):
        resp = self.get("/api/boards")
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    def new_board(self, title="Test Kitchen"):
        resp = self.post("/api/boards", {"title": title})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    def new_column(self, board_id, title, **extra):
        resp = self.post("/api/columns", {"title": title, "boardId": board_id, **extra})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    def new_card(self, column_id, title, **extra):
        payload = {"title": title, "columnId": column_id, "ingredients": [], **extra}
        resp = self.post("/api/cards", payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    def board(self, board_id):
        return next(b for b in self.boards() if b["id"] == board_id)

    def columns(self, board_id):
        return self.board(board_id)["columns"]

    def cards(self, column_id):
        for board in self.boards():
            for column in board["columns"]:
                if column["id"] == column_id:
                    return column["cards"]
        raise AssertionError(f"column {column_id} not visible")

    def titles(self, column_id):
        return [c["title"] for c in self.cards(column_id)]


class FlaskTransport:
    """Client transport that talks to the app in-process."""

    def __init__(self, client):
        self.client = client
        self.calls = []

    def send(self, method, path, body=None, headers=None):
        self.calls.append((method, path, body))
        resp = self.client.open(path, method=method, json=body, headers=headers)
        return resp.status_code, resp.get_json(silent=True)

    def writes(self):
        return [c for c in self.calls if c[0] != "GET"]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def app(store):
    return create_app(store, SECRET_KEY=SECRET, WEBHOOK_SECRET=WEBHOOK_SECRET, TESTING=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def alice(client):
    return BoardClient(client, ALICE)


@pytest.fixture
def bob(client):
    return BoardClient(client, BOB)


@pytest.fixture
def todo(alice):
    """Board with a "Todo" column holding cards A, B, C."""
    board = alice.new_board()
    column = alice.new_column(board["id"], "Todo")
    cards = [alice.new_card(column["id"], title) for title in "ABC"]
    return board, column, cards
