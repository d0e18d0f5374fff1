import logging

from recipeboard import reorder
from recipeboard.errors import ValidationError
from recipeboard.guard import board_ref, card_ref, column_ref, require
from recipeboard.models import (
    DEFAULT_BOARD_TITLE,
    DEFAULT_COLUMNS,
    DEFAULT_STATUS,
    board_json,
    card_json,
    column_json,
)
from recipeboard.validation import (
    optional_text,
    parse_ingredients,
    parse_instructions,
    parse_labels,
    parse_limit,
    parse_order,
    parse_status,
    require_id,
    require_title,
)

logger = logging.getLogger(__name__)


def _card_tree(tx, card):
    return card_json(card, tx.list_ingredients(card["id"]))


def _column_tree(tx, column):
    return column_json(column, [_card_tree(tx, c) for c in tx.list_cards(column["id"])])


def board_tree(tx, board):
    return board_json(board, [_column_tree(tx, c) for c in tx.list_columns(board["id"])])


# ---- Boards ----


def provision_default_board(tx, owner_id):
    board = tx.insert_board(owner_id, DEFAULT_BOARD_TITLE)
    for order, (title, limit) in enumerate(DEFAULT_COLUMNS):
        tx.insert_column(board["id"], title, order, limit)
    logger.info("Provisioned default board %s for user %s", board["id"], owner_id)
    return board


def list_boards(tx, principal_id):
    tx.ensure_user(principal_id)
    boards = tx.list_boards(principal_id)
    if not boards:
        boards = [provision_default_board(tx, principal_id)]
    return [board_tree(tx, b) for b in boards]


def create_board(tx, principal_id, data):
    title = require_title(data)
    tx.ensure_user(principal_id)
    board = tx.insert_board(principal_id, title)
    return board_json(board, [])


def update_board(tx, principal_id, board_id, data):
    require(tx, principal_id, board_ref(board_id))
    return board_json(tx.update_board(board_id, require_title(data)))


def delete_board(tx, principal_id, board_id):
    require(tx, principal_id, board_ref(board_id))
    tx.delete_board(board_id)


# ---- Columns ----


def create_column(tx, principal_id, data):
    title = require_title(data)
    board_id = require_id(data, "boardId")
    limit = parse_limit(data.get("limit"))
    require(tx, principal_id, board_ref(board_id))

    siblings = tx.list_columns(board_id)
    order = parse_order(data["order"]) if "order" in data else len(siblings)
    column = tx.insert_column(board_id, title, len(siblings), limit)
    reorder.insert_column_at(tx, board_id, column["id"], order)
    return column_json(tx.find_column(column["id"]), [])


def update_column(tx, principal_id, column_id, data):
    require(tx, principal_id, column_ref(column_id))
    fields = {}
    if "title" in data:
        fields["title"] = require_title(data)
    if "limit" in data:
        fields["card_limit"] = parse_limit(data["limit"])
    if not fields:
        raise ValidationError("Nothing to update")
    column = tx.update_column(column_id, fields)
    return _column_tree(tx, column)


def delete_column(tx, principal_id, column_id):
    require(tx, principal_id, column_ref(column_id))
    column = tx.find_column(column_id)
    tx.delete_column(column_id)
    reorder.compact_columns(tx, column["board_id"])


# ---- Cards ----


def create_card(tx, principal_id, data):
    title = require_title(data)
    column_id = require_id(data, "columnId")
    description = optional_text(data, "description")
    status = parse_status(data["status"]) if data.get("status") is not None else DEFAULT_STATUS.value
    instructions = parse_instructions(data.get("instructions") or [])
    labels = parse_labels(data.get("labels") or [])
    ingredients = parse_ingredients(data.get("ingredients") or [])
    require(tx, principal_id, column_ref(column_id))

    siblings = tx.list_cards(column_id)
    order = parse_order(data["order"]) if "order" in data else len(siblings)
    card = tx.insert_card(
        column_id, title, description, status, instructions, labels, len(siblings)
    )
    reorder.insert_card_at(tx, column_id, card["id"], order)
    tx.replace_ingredients(card["id"], ingredients)
    return _card_tree(tx, tx.find_card(card["id"]))


def update_card(tx, principal_id, card_id, data):
    """Partial update; ``ingredients`` and ``instructions`` replace wholesale."""
    require(tx, principal_id, card_ref(card_id))
    card = tx.find_card(card_id)

    fields = {}
    if "title" in data:
        fields["title"] = require_title(data)
    if "description" in data:
        fields["description"] = optional_text(data, "description")
    if "status" in data:
        fields["status"] = parse_status(data["status"])
    if "instructions" in data:
        fields["instructions"] = parse_instructions(data["instructions"])
    if "labels" in data:
        fields["labels"] = parse_labels(data["labels"])
    ingredients = parse_ingredients(data["ingredients"]) if "ingredients" in data else None

    moving = "columnId" in data or "order" in data
    if moving:
        dest_column_id = require_id(data, "columnId") if "columnId" in data else card["column_id"]
        if "order" in data:
            dest_index = parse_order(data["order"])
        else:
            dest_index = len(tx.list_cards(dest_column_id))

    if not fields and ingredients is None and not moving:
        raise ValidationError("Nothing to update")

    if moving:
        reorder.move_card(tx, principal_id, card, dest_column_id, dest_index)
    if fields:
        tx.update_card(card_id, fields)
    if ingredients is not None:
        tx.replace_ingredients(card_id, ingredients)
    return _card_tree(tx, tx.find_card(card_id))


def delete_card(tx, principal_id, card_id):
    require(tx, principal_id, card_ref(card_id))
    card = tx.find_card(card_id)
    tx.delete_card(card_id)
    reorder.compact_cards(tx, card["column_id"])


# ---- Users ----


def apply_identity_event(tx, event):
    """Mirror an identity provider user event into the users table."""
    event_type = event.get("type")
    data = event.get("data") or {}
    user_id = data.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise ValidationError("Event is missing a user id")

    if event_type in ("user.created", "user.updated"):
        emails = data.get("email_addresses") or []
        email = emails[0].get("email_address") if emails and isinstance(emails[0], dict) else None
        if not email:
            raise ValidationError("No email address provided")
        tx.upsert_user(
            user_id,
            email,
            data.get("first_name") or None,
            data.get("last_name") or None,
            data.get("image_url") or None,
        )
    elif event_type == "user.deleted":
        if not tx.delete_user(user_id):
            logger.info("Identity event for unknown user %s", user_id)
            return
    else:
        logger.info("Ignoring identity event %r", event_type)
        return
    logger.info("Applied identity event %s for user %s", event_type, user_id)
