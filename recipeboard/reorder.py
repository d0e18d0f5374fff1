"""Persisting drag-and-drop results.

Every function here runs inside the caller's store transaction, so a batch
either lands completely or is rolled back. Guards run before the first write.
"""

import logging

from recipeboard.errors import Conflict, NotFound, ValidationError
from recipeboard.guard import authorize, board_ref, column_ref, require
from recipeboard.ordering import insert_at, is_dense, is_noop, move_between, reorder

logger = logging.getLogger(__name__)


def write_column_order(tx, columns, ids):
    """Give each column in ``ids`` its position as order, skipping unchanged rows."""
    current = {c["id"]: c["order"] for c in columns}
    for index, column_id in enumerate(ids):
        if current.get(column_id) != index:
            tx.set_column_order(column_id, index)


def write_card_order(tx, column_id, cards, ids):
    """Place each card in ``ids`` into ``column_id`` at its position."""
    current = {c["id"]: (c["column_id"], c["order"]) for c in cards}
    for index, card_id in enumerate(ids):
        if current.get(card_id) != (column_id, index):
            tx.set_card_position(card_id, column_id, index)


def insert_column_at(tx, board_id, column_id, position):
    columns = tx.list_columns(board_id)
    ids = [c["id"] for c in columns if c["id"] != column_id]
    write_column_order(tx, columns, insert_at(ids, column_id, position))


def insert_card_at(tx, column_id, card_id, position):
    cards = tx.list_cards(column_id)
    ids = [c["id"] for c in cards if c["id"] != card_id]
    write_card_order(tx, column_id, cards, insert_at(ids, card_id, position))


def compact_columns(tx, board_id):
    columns = tx.list_columns(board_id)
    write_column_order(tx, columns, [c["id"] for c in columns])


def compact_cards(tx, column_id):
    cards = tx.list_cards(column_id)
    write_card_order(tx, column_id, cards, [c["id"] for c in cards])


# ---- Column reorder ----


def reorder_columns(tx, principal_id, board_id, entries):
    """Apply a full ``[{id, order}]`` column ordering to a board."""
    require(tx, principal_id, board_ref(board_id))
    columns = tx.list_columns(board_id)
    for entry in entries:
        column = tx.find_column(entry["id"])
        if column is None or column["board_id"] != board_id:
            raise NotFound("Column not found")

    expected = {c["id"] for c in columns}
    received = {e["id"] for e in entries}
    if received != expected:
        raise Conflict(
            "Column list does not match the board",
            details={"missing": sorted(expected - received)},
        )
    if not is_dense([e["order"] for e in entries]):
        raise ValidationError("Column orders must run from 0 to n-1 without gaps")

    ordered = [e["id"] for e in sorted(entries, key=lambda e: e["order"])]
    write_column_order(tx, columns, ordered)
    logger.info("Reordered %d columns on board %s", len(ordered), board_id)


def reorder_columns_from(tx, principal_id, column_id, board_id, entries):
    """Column reorder addressed through one of the board's columns."""
    column = tx.find_column(column_id)
    if column is None or column["board_id"] != board_id:
        raise NotFound("Column not found")
    reorder_columns(tx, principal_id, board_id, entries)


# ---- Card reorder / move ----


def reorder_cards(tx, principal_id, column_id, entries):
    """Apply ``[{id, order, columnId}]`` to cards.

    Handles same-column reorders and cross-column moves alike. Every column a
    card leaves or enters must end up densely ordered.
    """
    require(tx, principal_id, column_ref(column_id))
    affected = {column_id}
    for entry in entries:
        card = tx.find_card(entry["id"])
        if card is None or not authorize(tx, principal_id, column_ref(card["column_id"])):
            raise NotFound("Card not found")
        require(tx, principal_id, column_ref(entry["columnId"]))
        affected.update((card["column_id"], entry["columnId"]))

    for entry in entries:
        tx.set_card_position(entry["id"], entry["columnId"], entry["order"])

    for affected_id in sorted(affected):
        orders = [c["order"] for c in tx.list_cards(affected_id)]
        if not is_dense(orders):
            raise Conflict(
                "Card order is out of date", details={"columnId": affected_id}
            )
    logger.info(
        "Reordered %d cards across %d columns", len(entries), len(affected)
    )


def move_card(tx, principal_id, card, dest_column_id, dest_index):
    """Move one already-authorized card to ``dest_index`` of ``dest_column_id``."""
    source_id = card["column_id"]
    source = tx.list_cards(source_id)
    source_ids = [c["id"] for c in source]
    from_index = source_ids.index(card["id"])
    if is_noop(source_id, dest_column_id, from_index, dest_index):
        return

    if source_id == dest_column_id:
        write_card_order(tx, source_id, source, reorder(source_ids, from_index, dest_index))
        return

    require(tx, principal_id, column_ref(dest_column_id))
    destination = tx.list_cards(dest_column_id)
    new_source, new_destination = move_between(
        source_ids, [c["id"] for c in destination], from_index, dest_index
    )
    write_card_order(tx, source_id, source, new_source)
    write_card_order(tx, dest_column_id, source + destination, new_destination)
