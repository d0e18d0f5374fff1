"""Optimistic client-side board state.

``BoardStore`` mirrors one board in memory so a UI can render synchronously.
Moves and deletes are applied locally first and confirmed by the server
afterwards; creates and edits wait for the server because it assigns ids and
timestamps.

Recovery from a failed mutation always refetches the board from the server.
The pre-move snapshot is never restored: once a second move has been applied
on top of it, that snapshot no longer describes anything the user did. Fetch
responses are only applied when no mutation was issued after the fetch
started and nothing is in flight; otherwise the store stays marked stale and
refetches as soon as the last in-flight mutation settles.

The store runs on one asyncio event loop. Blocking HTTP calls are pushed to
worker threads, so several requests may be outstanding and complete out of
order.
"""

import asyncio
import logging

from recipeboard import ordering
from recipeboard.errors import BoardError, Unauthenticated

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Could not save your changes. Please try again."
SESSION_EXPIRED = "Your session has expired. Please sign in again."


class BoardStore:
    def __init__(self, api, token_provider=None):
        """``token_provider`` is called with no arguments and returns a bearer
        token or None. It is used when no token is held and once after a 401.
        """
        self.api = api
        self.token_provider = token_provider
        self._epoch = 0
        self.reset()

    def reset(self):
        self.board = None
        self.columns = []
        self.is_loading = False
        self.error = None
        self.auth_token = None
        # Responses belonging to an earlier session are ignored.
        self._epoch += 1
        self._revision = 0
        self._in_flight = 0
        self._stale = False

    @property
    def is_stale(self):
        return self._stale

    @property
    def pending(self):
        return self._in_flight

    # ---- Session ----

    async def sign_in(self, token):
        self.reset()
        self.auth_token = token
        return await self.fetch_board()

    def sign_out(self):
        self.reset()

    def _expire_session(self):
        logger.warning("Bearer token rejected after refresh, clearing session")
        self.reset()
        self.error = SESSION_EXPIRED

    # ---- Lookups ----

    def column(self, column_id):
        for column in self.columns:
            if column["id"] == column_id:
                return column
        return None

    def find_card(self, card_id):
        """Return ``(column, index)`` for a card, or ``(None, None)``."""
        for column in self.columns:
            for index, card in enumerate(column["cards"]):
                if card["id"] == card_id:
                    return column, index
        return None, None

    def _renumber_columns(self):
        for index, column in enumerate(self.columns):
            column["order"] = index

    @staticmethod
    def _renumber_cards(column):
        for index, card in enumerate(column["cards"]):
            card["order"] = index
            card["columnId"] = column["id"]

    # ---- Server calls ----

    def _acquire_token(self):
        if not self.auth_token and self.token_provider is not None:
            self.auth_token = self.token_provider()
        if not self.auth_token:
            raise Unauthenticated("No bearer token available")
        return self.auth_token

    async def _call(self, method, *args):
        epoch = self._epoch
        token = self._acquire_token()
        try:
            return await asyncio.to_thread(method, *args, token=token)
        except Unauthenticated:
            if epoch != self._epoch:
                raise
            self.auth_token = None
            refreshed = self.token_provider() if self.token_provider else None
            if not refreshed:
                self._expire_session()
                raise
            self.auth_token = refreshed
        try:
            return await asyncio.to_thread(method, *args, token=refreshed)
        except Unauthenticated:
            if epoch == self._epoch:
                self._expire_session()
            raise

    def _report(self, action, exc):
        logger.warning("%s failed with %s: %s", action, type(exc).__name__, exc.message)
        if self.error != SESSION_EXPIRED:
            self.error = GENERIC_ERROR

    async def _commit(self, action, method, *args, apply=None):
        epoch = self._epoch
        self._revision += 1
        self._in_flight += 1
        failure = None
        try:
            result = await self._call(method, *args)
        except BoardError as exc:
            failure = exc
        except Exception:
            if epoch == self._epoch:
                self._stale = True
            raise
        finally:
            if epoch == self._epoch:
                self._in_flight -= 1
        if epoch != self._epoch:
            return False
        if failure is not None:
            self._report(action, failure)
            self._stale = True
            await self._settle()
            return False
        if apply is not None:
            apply(result)
        await self._settle()
        return True

    async def _settle(self):
        if self._stale and not self._in_flight:
            await self.fetch_board()

    # ---- Board ----

    def _apply_board(self, board):
        if board is None:
            self.board = None
            self.columns = []
            return
        self.board = {k: v for k, v in board.items() if k != "columns"}
        columns = sorted(board.get("columns", []), key=lambda c: c["order"])
        for column in columns:
            column["cards"] = sorted(column.get("cards", []), key=lambda c: c["order"])
        self.columns = columns

    async def fetch_board(self):
        """Load the user's first board and make it the local state."""
        epoch, revision = self._epoch, self._revision
        self.is_loading = True
        try:
            boards = await self._call(self.api.get_boards)
        except BoardError as exc:
            if epoch == self._epoch:
                self._report("fetch board", exc)
            return False
        finally:
            if epoch == self._epoch:
                self.is_loading = False
        if epoch != self._epoch:
            return False
        if revision != self._revision or self._in_flight:
            logger.debug("Discarding board response older than local changes")
            self._stale = True
            return False
        self._apply_board(boards[0] if boards else None)
        self._stale = False
        return True

    # ---- Moves ----

    async def move_card(self, from_column_id, to_column_id, from_index, to_index):
        """Apply a card drag locally, then persist every touched column at once."""
        if ordering.is_noop(from_column_id, to_column_id, from_index, to_index):
            return True
        source = self.column(from_column_id)
        destination = self.column(to_column_id)
        if source is None or destination is None:
            logger.warning("Ignoring move between unknown columns")
            return False

        if source is destination:
            source["cards"] = ordering.reorder(source["cards"], from_index, to_index)
            touched = [source]
        else:
            source["cards"], destination["cards"] = ordering.move_between(
                source["cards"], destination["cards"], from_index, to_index
            )
            touched = [destination, source]

        entries = []
        for column in touched:
            self._renumber_cards(column)
            entries.extend(
                {"id": c["id"], "order": c["order"], "columnId": c["columnId"]}
                for c in column["cards"]
            )
        return await self._commit(
            "move card", self.api.update_card_order, to_column_id, entries
        )

    async def move_column(self, from_index, to_index):
        if from_index == to_index:
            return True
        if self.board is None:
            return False
        self.columns = ordering.reorder(self.columns, from_index, to_index)
        self._renumber_columns()
        entries = ordering.assign_order([c["id"] for c in self.columns])
        return await self._commit(
            "move column", self.api.update_column_order, self.board["id"], entries
        )

    # ---- Columns ----

    async def add_column(self, title, limit=None):
        if self.board is None:
            return False
        payload = {"title": title, "boardId": self.board["id"], "order": len(self.columns)}
        if limit is not None:
            payload["limit"] = limit

        def apply(column):
            column["cards"] = []
            self.columns = ordering.insert_at(self.columns, column, column["order"])
            self._renumber_columns()

        return await self._commit("add column", self.api.create_column, payload, apply=apply)

    async def update_column(self, column_id, changes):
        def apply(updated):
            column = self.column(column_id)
            if column is not None:
                column["title"] = updated["title"]
                column["limit"] = updated["limit"]

        return await self._commit(
            "update column", self.api.update_column, column_id, changes, apply=apply
        )

    async def delete_column(self, column_id):
        self.columns = [c for c in self.columns if c["id"] != column_id]
        self._renumber_columns()
        return await self._commit("delete column", self.api.delete_column, column_id)

    # ---- Cards ----

    async def add_card(self, column_id, title, fields=None):
        column = self.column(column_id)
        if column is None:
            return False
        payload = {"ingredients": [], **(fields or {})}
        payload.update(title=title, columnId=column_id, order=len(column["cards"]))

        def apply(card):
            target = self.column(card["columnId"])
            if target is not None:
                target["cards"] = ordering.insert_at(target["cards"], card, card["order"])
                self._renumber_cards(target)

        return await self._commit("add card", self.api.create_card, payload, apply=apply)

    async def update_card(self, card_id, changes):
        def apply(card):
            column, index = self.find_card(card_id)
            if column is not None:
                del column["cards"][index]
                self._renumber_cards(column)
            target = self.column(card["columnId"])
            if target is not None:
                target["cards"] = ordering.insert_at(target["cards"], card, card["order"])
                self._renumber_cards(target)

        return await self._commit(
            "update card", self.api.update_card, card_id, changes, apply=apply
        )

    async def delete_card(self, card_id):
        column, index = self.find_card(card_id)
        if column is not None:
            del column["cards"][index]
            self._renumber_cards(column)
        return await self._commit("delete card", self.api.delete_card, card_id)
