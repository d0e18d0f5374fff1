import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from recipeboard import config, crud, reorder
from recipeboard.auth import require_auth, verify_webhook
from recipeboard.errors import BoardError
from recipeboard.validation import parse_order_entries, require_id, require_object

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)


def make_store(backend=None):
    backend = backend or config.STORE_BACKEND
    if backend == "memory":
        from recipeboard.memory import MemoryStore

        return MemoryStore()
    if backend == "postgres":
        from recipeboard.db import PostgresStore

        return PostgresStore()
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def create_app(store=None, **overrides):
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        WEBHOOK_SECRET=config.WEBHOOK_SECRET,
    )
    app.config.update(overrides)
    app.extensions["recipeboard_store"] = store or make_store()

    app.register_blueprint(api)
    app.register_error_handler(BoardError, _board_error)
    app.register_error_handler(HTTPException, _http_error)
    app.register_error_handler(Exception, _unexpected_error)
    return app


def transaction():
    return current_app.extensions["recipeboard_store"].transaction()


def json_body():
    return require_object(request.get_json(silent=True))


def _board_error(exc):
    status = exc.status or 500
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.path, exc.message)
    return jsonify(exc.to_dict()), status


def _http_error(exc):
    return jsonify({"error": exc.description}), exc.code


def _unexpected_error(exc):
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error", "details": type(exc).__name__}), 500


@api.route("/health")
def health():
    return jsonify({"message": "OK"})


# ---- Boards ----


@api.route("/api/boards", methods=["GET"])
@require_auth
def list_boards():
    with transaction() as tx:
        boards = crud.list_boards(tx, request.user_id)
    return jsonify(boards)


@api.route("/api/boards", methods=["POST"])
@require_auth
def create_board():
    data = json_body()
    with transaction() as tx:
        board = crud.create_board(tx, request.user_id, data)
    return jsonify(board), 201


@api.route("/api/boards/<board_id>", methods=["PUT"])
@require_auth
def update_board(board_id):
    data = json_body()
    with transaction() as tx:
        board = crud.update_board(tx, request.user_id, board_id, data)
    return jsonify(board)


@api.route("/api/boards/<board_id>", methods=["DELETE"])
@require_auth
def delete_board(board_id):
    with transaction() as tx:
        crud.delete_board(tx, request.user_id, board_id)
    return jsonify({"success": True})


@api.route("/api/boards/<board_id>/columns", methods=["PUT"])
@require_auth
def update_column_order(board_id):
    entries = parse_order_entries(json_body().get("columns"), "columns")
    with transaction() as tx:
        reorder.reorder_columns(tx, request.user_id, board_id, entries)
    return jsonify({"success": True})


# ---- Columns ----


@api.route("/api/columns", methods=["POST"])
@require_auth
def create_column():
    data = json_body()
    with transaction() as tx:
        column = crud.create_column(tx, request.user_id, data)
    return jsonify(column), 201


@api.route("/api/columns/<column_id>", methods=["PUT"])
@require_auth
def update_column(column_id):
    data = json_body()
    with transaction() as tx:
        column = crud.update_column(tx, request.user_id, column_id, data)
    return jsonify(column)


@api.route("/api/columns/<column_id>/cards", methods=["PUT"])
@require_auth
def update_card_order(column_id):
    entries = parse_order_entries(json_body().get("cards"), "cards", with_column=True)
    with transaction() as tx:
        reorder.reorder_cards(tx, request.user_id, column_id, entries)
    return jsonify({"success": True})


@api.route("/api/columns/<column_id>/reorder", methods=["PUT"])
@require_auth
def reorder_columns(column_id):
    data = json_body()
    board_id = require_id(data, "boardId")
    entries = parse_order_entries(data.get("columns"), "columns")
    with transaction() as tx:
        reorder.reorder_columns_from(tx, request.user_id, column_id, board_id, entries)
    return jsonify({"success": True})


@api.route("/api/columns/<column_id>", methods=["DELETE"])
@require_auth
def delete_column(column_id):
    with transaction() as tx:
        crud.delete_column(tx, request.user_id, column_id)
    return jsonify({"success": True})


# ---- Cards ----


@api.route("/api/cards", methods=["POST"])
@require_auth
def create_card():
    data = json_body()
    with transaction() as tx:
        card = crud.create_card(tx, request.user_id, data)
    return jsonify(card), 201


@api.route("/api/cards/<card_id>", methods=["PUT"])
@require_auth
def update_card(card_id):
    data = json_body()
    with transaction() as tx:
        card = crud.update_card(tx, request.user_id, card_id, data)
    return jsonify(card)


@api.route("/api/cards/<card_id>", methods=["DELETE"])
@require_auth
def delete_card(card_id):
    with transaction() as tx:
        crud.delete_card(tx, request.user_id, card_id)
    return jsonify({"success": True})


# ---- Webhooks ----


@api.route("/api/webhooks/identity", methods=["POST"])
def identity_webhook():
    event = verify_webhook(
        request.get_data(as_text=True),
        request.headers,
        current_app.config["WEBHOOK_SECRET"],
    )
    require_object(event)
    with transaction() as tx:
        crud.apply_identity_event(tx, event)
    return jsonify({"success": True})
