from datetime import datetime, timedelta

from recipeboard.auth import create_token
from tests.conftest import SECRET


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "OK"}


def test_boards_require_bearer_token(client):
    resp = client.get("/api/boards")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Authentication required"}


def test_invalid_token_is_rejected(client):
    resp = client.get("/api/boards", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Invalid token"


def test_token_signed_with_other_secret_is_rejected(client):
    token = create_token("user_alice", "some-other-secret-key-for-signing-tokens")
    resp = client.get("/api/boards", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_expired_token_is_rejected(client):
    token = create_token("user_alice", SECRET, expires_in=timedelta(seconds=-10))
    resp = client.get("/api/boards", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Token expired"


def test_first_fetch_provisions_default_board(alice, store):
    boards = alice.boards()
    assert len(boards) == 1
    board = boards[0]
    assert board["title"] == "Recipe Development"
    assert board["ownerId"] == "user_alice"
    assert [(c["title"], c["order"], c["limit"]) for c in board["columns"]] == [
        ("To Do", 0, 5),
        ("In Progress", 1, 3),
        ("Testing", 2, 3),
        ("Completed", 3, 5),
    ]
    assert all(c["cards"] == [] for c in board["columns"])
    with store.transaction() as tx:
        assert tx.find_user("user_alice") is not None


def test_provisioning_happens_once(alice):
    first = alice.boards()
    second = alice.boards()
    assert [b["id"] for b in first] == [b["id"] for b in second]


def test_create_board(alice):
    board = alice.new_board("  Pastry  ")
    assert board["title"] == "Pastry"
    assert board["columns"] == []
    assert board["id"] in [b["id"] for b in alice.boards()]


def test_timestamps_are_iso_8601(alice):
    board = alice.new_board("Pastry")
    column = alice.new_column(board["id"], "To Do")
    card = alice.new_card(column["id"], "Tart")
    for entity in (board, column, card):
        created = datetime.fromisoformat(entity["createdAt"])
        updated = datetime.fromisoformat(entity["updatedAt"])
        assert created.tzinfo is not None
        assert updated >= created


def test_create_board_requires_title(alice):
    resp = alice.post("/api/boards", {"title": "   "})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Title is required"}


def test_non_object_body_is_rejected(alice):
    resp = alice.post("/api/boards", ["title"])
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Request body must be a JSON object"


def test_users_only_see_their_own_boards(alice, bob):
    alice_board = alice.new_board("Alice's")
    assert alice_board["id"] not in [b["id"] for b in bob.boards()]


def test_rename_board(alice):
    board = alice.new_board()
    resp = alice.put(f"/api/boards/{board['id']}", {"title": "Renamed"})
    assert resp.status_code == 200
    assert resp.get_json()["title"] == "Renamed"


def test_rename_other_users_board_is_not_found(alice, bob):
    board = alice.new_board()
    resp = bob.put(f"/api/boards/{board['id']}", {"title": "Mine now"})
    assert resp.status_code == 404
    assert alice.board(board["id"])["title"] == "Test Kitchen"


def test_delete_board_cascades(alice, store):
    board = alice.new_board()
    column = alice.new_column(board["id"], "Todo")
    alice.new_card(column["id"], "Soup")
    resp = alice.delete(f"/api/boards/{board['id']}")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True}
    with store.transaction() as tx:
        assert tx.find_board(board["id"]) is None
        assert tx.find_column(column["id"]) is None
        assert tx.list_cards(column["id"]) == []


def test_delete_other_users_board_is_not_found(alice, bob):
    board = alice.new_board()
    resp = bob.delete(f"/api/boards/{board['id']}")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Board not found"}


def test_unknown_route_returns_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.get_json()
