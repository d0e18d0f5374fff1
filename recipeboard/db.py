"""PostgreSQL store.

Each ``transaction()`` opens one connection, hands out a session bound to a
``RealDictCursor`` and commits on success or rolls back on any exception, so
every request's writes land together or not at all.
"""

import uuid
from contextlib import contextmanager

import psycopg2
import psycopg2.extras

from recipeboard import config

BOARD_FIELDS = "id, owner_id, title, created_at, updated_at"
COLUMN_FIELDS = 'id, board_id, title, "order", card_limit, created_at, updated_at'
CARD_FIELDS = (
    'id, column_id, title, description, status, instructions, labels, "order", '
    "created_at, updated_at"
)
INGREDIENT_FIELDS = "id, card_id, name, quantity, unit"
USER_FIELDS = "id, email, first_name, last_name, image_url, created_at"


def get_db(params=None):
    return psycopg2.connect(**(params or config.database_params()))


def _new_id():
    return str(uuid.uuid4())


def _one(cur):
    row = cur.fetchone()
    return dict(row) if row else None


def _all(cur):
    return [dict(r) for r in cur.fetchall()]


class PostgresSession:
    def __init__(self, cur):
        self.cur = cur

    # ---- Users ----

    def find_user(self, user_id):
        self.cur.execute(f"SELECT {USER_FIELDS} FROM users WHERE id = %s", (user_id,))
        return _one(self.cur)

    def ensure_user(self, user_id):
        self.cur.execute(
            "INSERT INTO users (id) VALUES (%s) ON CONFLICT (id) DO NOTHING",
            (user_id,),
        )

    def upsert_user(self, user_id, email, first_name=None, last_name=None, image_url=None):
        self.cur.execute(
            f"""
            INSERT INTO users (id, email, first_name, last_name, image_url)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE SET
                email = EXCLUDED.email,
                first_name = EXCLUDED.first_name,
                last_name = EXCLUDED.last_name,
                image_url = EXCLUDED.image_url
            RETURNING {USER_FIELDS}
            """,
            (user_id, email, first_name, last_name, image_url),
        )
        return _one(self.cur)

    def delete_user(self, user_id):
        self.cur.execute("DELETE FROM users WHERE id = %s", (user_id,))
        return self.cur.rowcount > 0

    # ---- Boards ----

    def list_boards(self, owner_id):
        self.cur.execute(
            f"SELECT {BOARD_FIELDS} FROM boards WHERE owner_id = %s ORDER BY created_at, id",
            (owner_id,),
        )
        return _all(self.cur)

    def find_board(self, board_id):
        self.cur.execute(f"SELECT {BOARD_FIELDS} FROM boards WHERE id = %s", (board_id,))
        return _one(self.cur)

    def insert_board(self, owner_id, title):
        self.cur.execute(
            f"INSERT INTO boards (id, owner_id, title) VALUES (%s, %s, %s) RETURNING {BOARD_FIELDS}",
            (_new_id(), owner_id, title),
        )
        return _one(self.cur)

    def update_board(self, board_id, title):
        self.cur.execute(
            f"UPDATE boards SET title = %s, updated_at = NOW() WHERE id = %s RETURNING {BOARD_FIELDS}",
            (title, board_id),
        )
        return _one(self.cur)

    def delete_board(self, board_id):
        self.cur.execute("DELETE FROM boards WHERE id = %s", (board_id,))

    # ---- Columns ----

    def list_columns(self, board_id):
        self.cur.execute(
            f'SELECT {COLUMN_FIELDS} FROM columns WHERE board_id = %s ORDER BY "order", id',
            (board_id,),
        )
        return _all(self.cur)

    def find_column(self, column_id):
        self.cur.execute(f"SELECT {COLUMN_FIELDS} FROM columns WHERE id = %s", (column_id,))
        return _one(self.cur)

    def insert_column(self, board_id, title, order, card_limit=None):
        self.cur.execute(
            f"""
            INSERT INTO columns (id, board_id, title, "order", card_limit)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING {COLUMN_FIELDS}
            """,
            (_new_id(), board_id, title, order, card_limit),
        )
        return _one(self.cur)

    def update_column(self, column_id, fields):
        assignments = [f"{name} = %s" for name in fields]
        self.cur.execute(
            f"UPDATE columns SET {', '.join(assignments)}, updated_at = NOW() "
            f"WHERE id = %s RETURNING {COLUMN_FIELDS}",
            [*fields.values(), column_id],
        )
        return _one(self.cur)

    def set_column_order(self, column_id, order):
        self.cur.execute(
            'UPDATE columns SET "order" = %s, updated_at = NOW() WHERE id = %s',
            (order, column_id),
        )
        if self.cur.rowcount != 1:
            raise LookupError(f"column {column_id} vanished during reorder")

    def delete_column(self, column_id):
        self.cur.execute("DELETE FROM columns WHERE id = %s", (column_id,))

    # ---- Cards ----

    def list_cards(self, column_id):
        self.cur.execute(
            f'SELECT {CARD_FIELDS} FROM cards WHERE column_id = %s ORDER BY "order", id',
            (column_id,),
        )
        return _all(self.cur)

    def find_card(self, card_id):
        self.cur.execute(f"SELECT {CARD_FIELDS} FROM cards WHERE id = %s", (card_id,))
        return _one(self.cur)

    def insert_card(self, column_id, title, description, status, instructions, labels, order):
        self.cur.execute(
            f"""
            INSERT INTO cards (id, column_id, title, description, status, instructions, labels, "order")
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {CARD_FIELDS}
            """,
            (_new_id(), column_id, title, description, status, instructions, labels, order),
        )
        return _one(self.cur)

    def update_card(self, card_id, fields):
        assignments = [f"{name} = %s" for name in fields]
        self.cur.execute(
            f"UPDATE cards SET {', '.join(assignments)}, updated_at = NOW() "
            f"WHERE id = %s RETURNING {CARD_FIELDS}",
            [*fields.values(), card_id],
        )
        return _one(self.cur)

    def set_card_position(self, card_id, column_id, order):
        self.cur.execute(
            'UPDATE cards SET column_id = %s, "order" = %s, updated_at = NOW() WHERE id = %s',
            (column_id, order, card_id),
        )
        if self.cur.rowcount != 1:
            raise LookupError(f"card {card_id} vanished during reorder")

    def delete_card(self, card_id):
        self.cur.execute("DELETE FROM cards WHERE id = %s", (card_id,))

    # ---- Ingredients ----

    def list_ingredients(self, card_id):
        self.cur.execute(
            f"SELECT {INGREDIENT_FIELDS} FROM ingredients WHERE card_id = %s ORDER BY position",
            (card_id,),
        )
        return _all(self.cur)

    def replace_ingredients(self, card_id, ingredients):
        self.cur.execute("DELETE FROM ingredients WHERE card_id = %s", (card_id,))
        rows = []
        for position, item in enumerate(ingredients):
            self.cur.execute(
                f"""
                INSERT INTO ingredients (id, card_id, name, quantity, unit, position)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {INGREDIENT_FIELDS}
                """,
                (_new_id(), card_id, item["name"], item["quantity"], item["unit"], position),
            )
            rows.append(_one(self.cur))
        return rows


class PostgresStore:
    def __init__(self, params=None):
        self.params = params

    @contextmanager
    def transaction(self):
        conn = get_db(self.params)
        cur = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        try:
            yield PostgresSession(cur)
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            cur.close()
            conn.close()
