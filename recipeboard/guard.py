from collections import namedtuple

from recipeboard.errors import NotFound

EntityRef = namedtuple("EntityRef", ["kind", "id"])

BOARD = "board"
COLUMN = "column"
CARD = "card"


def board_ref(board_id):
    return EntityRef(BOARD, board_id)


def column_ref(column_id):
    return EntityRef(COLUMN, column_id)


def card_ref(card_id):
    return EntityRef(CARD, card_id)


def owner_of(tx, ref):
    """Return the owning user id for ``ref``, or None if the chain is broken."""
    kind, entity_id = ref
    if entity_id is None:
        return None
    if kind == CARD:
        card = tx.find_card(entity_id)
        if card is None:
            return None
        kind, entity_id = COLUMN, card["column_id"]
    if kind == COLUMN:
        column = tx.find_column(entity_id)
        if column is None:
            return None
        kind, entity_id = BOARD, column["board_id"]
    if kind == BOARD:
        board = tx.find_board(entity_id)
        return board["owner_id"] if board is not None else None
    raise ValueError(f"Unknown entity kind: {kind!r}")


def authorize(tx, principal_id, ref):
    if principal_id is None:
        return False
    return owner_of(tx, ref) == principal_id


def require(tx, principal_id, ref):
    if not authorize(tx, principal_id, ref):
        raise NotFound(f"{ref.kind.capitalize()} not found")
