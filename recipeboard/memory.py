"""In-process store with the same session interface as ``PostgresStore``."""

import copy
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

TABLES = ("users", "boards", "columns", "cards", "ingredients")


def _now():
    return datetime.now(timezone.utc)


def _new_id():
    return str(uuid.uuid4())


class MemorySession:
    def __init__(self, tables):
        self.tables = tables

    def _get(self, table, key):
        row = self.tables[table].get(key)
        return copy.deepcopy(row) if row is not None else None

    def _select(self, table, sort_key, **where):
        rows = [
            copy.deepcopy(row)
            for row in self.tables[table].values()
            if all(row[k] == v for k, v in where.items())
        ]
        return sorted(rows, key=sort_key)

    def _touch(self, table, key, fields):
        row = self.tables[table].get(key)
        if row is None:
            return None
        row.update(fields)
        row["updated_at"] = _now()
        return copy.deepcopy(row)

    # ---- Users ----

    def find_user(self, user_id):
        return self._get("users", user_id)

    def ensure_user(self, user_id):
        if user_id not in self.tables["users"]:
            self.tables["users"][user_id] = {
                "id": user_id,
                "email": None,
                "first_name": None,
                "last_name": None,
                "image_url": None,
                "created_at": _now(),
            }

    def upsert_user(self, user_id, email, first_name=None, last_name=None, image_url=None):
        self.ensure_user(user_id)
        self.tables["users"][user_id].update(
            email=email, first_name=first_name, last_name=last_name, image_url=image_url
        )
        return self._get("users", user_id)

    def delete_user(self, user_id):
        if self.tables["users"].pop(user_id, None) is None:
            return False
        for board in self.list_boards(user_id):
            self.delete_board(board["id"])
        return True

    # ---- Boards ----

    def list_boards(self, owner_id):
        return self._select("boards", lambda r: r["created_at"], owner_id=owner_id)

    def find_board(self, board_id):
        return self._get("boards", board_id)

    def insert_board(self, owner_id, title):
        now = _now()
        row = {
            "id": _new_id(),
            "owner_id": owner_id,
            "title": title,
            "created_at": now,
            "updated_at": now,
        }
        self.tables["boards"][row["id"]] = row
        return copy.deepcopy(row)

    def update_board(self, board_id, title):
        return self._touch("boards", board_id, {"title": title})

    def delete_board(self, board_id):
        for column in self.list_columns(board_id):
            self.delete_column(column["id"])
        self.tables["boards"].pop(board_id, None)

    # ---- Columns ----

    def list_columns(self, board_id):
        return self._select("columns", lambda r: (r["order"], r["id"]), board_id=board_id)

    def find_column(self, column_id):
        return self._get("columns", column_id)

    def insert_column(self, board_id, title, order, card_limit=None):
        now = _now()
        row = {
            "id": _new_id(),
            "board_id": board_id,
            "title": title,
            "order": order,
            "card_limit": card_limit,
            "created_at": now,
            "updated_at": now,
        }
        self.tables["columns"][row["id"]] = row
        return copy.deepcopy(row)

    def update_column(self, column_id, fields):
        return self._touch("columns", column_id, fields)

    def set_column_order(self, column_id, order):
        if self._touch("columns", column_id, {"order": order}) is None:
            raise LookupError(f"column {column_id} vanished during reorder")

    def delete_column(self, column_id):
        for card in self.list_cards(column_id):
            self.delete_card(card["id"])
        self.tables["columns"].pop(column_id, None)

    # ---- Cards ----

    def list_cards(self, column_id):
        return self._select("cards", lambda r: (r["order"], r["id"]), column_id=column_id)

    def find_card(self, card_id):
        return self._get("cards", card_id)

    def insert_card(self, column_id, title, description, status, instructions, labels, order):
        now = _now()
        row = {
            "id": _new_id(),
            "column_id": column_id,
            "title": title,
            "description": description,
            "status": status,
            "instructions": list(instructions),
            "labels": list(labels),
            "order": order,
            "created_at": now,
            "updated_at": now,
        }
        self.tables["cards"][row["id"]] = row
        return copy.deepcopy(row)

    def update_card(self, card_id, fields):
        return self._touch("cards", card_id, fields)

    def set_card_position(self, card_id, column_id, order):
        if self._touch("cards", card_id, {"column_id": column_id, "order": order}) is None:
            raise LookupError(f"card {card_id} vanished during reorder")

    def delete_card(self, card_id):
        for ingredient in self.list_ingredients(card_id):
            self.tables["ingredients"].pop(ingredient["id"], None)
        self.tables["cards"].pop(card_id, None)

    # ---- Ingredients ----

    def list_ingredients(self, card_id):
        rows = self._select("ingredients", lambda r: r["position"], card_id=card_id)
        for row in rows:
            del row["position"]
        return rows

    def replace_ingredients(self, card_id, ingredients):
        for ingredient in self.list_ingredients(card_id):
            self.tables["ingredients"].pop(ingredient["id"], None)
        for position, item in enumerate(ingredients):
            row = {
                "id": _new_id(),
                "card_id": card_id,
                "name": item["name"],
                "quantity": item["quantity"],
                "unit": item["unit"],
                "position": position,
            }
            self.tables["ingredients"][row["id"]] = row
        return self.list_ingredients(card_id)


class MemoryStore:
    def __init__(self):
        self._lock = threading.RLock()
        self._tables = {name: {} for name in TABLES}

    @contextmanager
    def transaction(self):
        with self._lock:
            snapshot = copy.deepcopy(self._tables)
            try:
                yield MemorySession(self._tables)
            except BaseException:
                self._tables.clear()
                self._tables.update(snapshot)
                raise
