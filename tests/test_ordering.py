import pytest

from recipeboard.ordering import (
    assign_order,
    insert_at,
    is_dense,
    is_noop,
    move_between,
    reorder,
)


def test_reorder_moves_element_forward():
    assert reorder(["A", "B", "C"], 1, 0) == ["B", "A", "C"]


def test_reorder_uses_splice_not_swap():
    assert reorder(["A", "B", "C", "D"], 0, 2) == ["B", "C", "A", "D"]


def test_reorder_same_index_is_unchanged_copy():
    seq = ["A", "B", "C"]
    result = reorder(seq, 1, 1)
    assert result == seq
    assert result is not seq


def test_reorder_round_trip_restores_sequence():
    seq = ["A", "B", "C", "D"]
    moved = reorder(seq, 2, 0)
    assert moved == ["C", "A", "B", "D"]
    assert reorder(moved, 0, 2) == seq


def test_reorder_clamps_target_to_last_position():
    assert reorder(["A", "B", "C"], 0, 99) == ["B", "C", "A"]
    assert reorder(["A", "B", "C"], 2, -5) == ["C", "A", "B"]


def test_reorder_does_not_mutate_input():
    seq = ["A", "B", "C"]
    reorder(seq, 0, 2)
    assert seq == ["A", "B", "C"]


def test_reorder_rejects_missing_source():
    with pytest.raises(IndexError):
        reorder(["A"], 3, 0)


def test_move_between_columns():
    source, dest = move_between(["A", "B"], ["C"], 0, 1)
    assert source == ["B"]
    assert dest == ["C", "A"]


def test_move_between_into_empty_destination():
    source, dest = move_between(["A", "B"], [], 1, 4)
    assert source == ["A"]
    assert dest == ["B"]


def test_move_between_past_end_appends():
    _, dest = move_between(["X"], ["A", "B"], 0, 10)
    assert dest == ["A", "B", "X"]


def test_insert_at_clamps():
    assert insert_at(["A", "B"], "Z", 1) == ["A", "Z", "B"]
    assert insert_at(["A", "B"], "Z", 7) == ["A", "B", "Z"]


def test_assign_order_uses_positions():
    assert assign_order(["c1", "c2"]) == [
        {"id": "c1", "order": 0},
        {"id": "c2", "order": 1},
    ]


@pytest.mark.parametrize(
    "orders, expected",
    [
        ([], True),
        ([2, 0, 1], True),
        ([0, 2], False),
        ([0, 0, 1], False),
        ([1, 2, 3], False),
    ],
)
def test_is_dense(orders, expected):
    assert is_dense(orders) is expected


def test_is_noop():
    assert is_noop("todo", "todo", 2, 2)
    assert not is_noop("todo", "doing", 2, 2)
    assert not is_noop("todo", "todo", 2, 1)
