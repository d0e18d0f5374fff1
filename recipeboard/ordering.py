"""Dense zero-based ordering of sibling sets.

Cards within a column and columns within a board are kept as sequences whose
persisted ``order`` is simply the position in the sequence. Moves use list
splice semantics (remove, then insert), never swaps.
"""


def _clamp(index, low, high):
    return max(low, min(index, high))


def _check_source(sequence, from_index):
    if not 0 <= from_index < len(sequence):
        raise IndexError(
            f"from_index {from_index} out of range for {len(sequence)} items"
        )


def is_noop(from_container, to_container, from_index, to_index):
    """True when a drag ends where it started and nothing must be written."""
    return from_container == to_container and from_index == to_index


def reorder(sequence, from_index, to_index):
    """Move the element at ``from_index`` to ``to_index`` within one sequence.

    ``to_index`` is clamped to ``[0, len(sequence) - 1]``. A new list is
    returned; the input is left untouched.
    """
    _check_source(sequence, from_index)
    result = list(sequence)
    if from_index == to_index:
        return result
    item = result.pop(from_index)
    result.insert(_clamp(to_index, 0, len(result)), item)
    return result


def move_between(source, destination, from_index, to_index):
    """Move an element from ``source`` into ``destination``.

    Returns the new ``(source, destination)`` pair. ``to_index`` is clamped to
    ``[0, len(destination)]`` so an index past the end appends.
    """
    _check_source(source, from_index)
    new_source = list(source)
    new_destination = list(destination)
    item = new_source.pop(from_index)
    new_destination.insert(_clamp(to_index, 0, len(new_destination)), item)
    return new_source, new_destination


def insert_at(sequence, item, index):
    """Insert ``item`` at ``index`` clamped to ``[0, len(sequence)]``."""
    result = list(sequence)
    result.insert(_clamp(index, 0, len(result)), item)
    return result


def assign_order(ids):
    return [{"id": entity_id, "order": index} for index, entity_id in enumerate(ids)]


def is_dense(orders):
    """Sorted ``orders`` equal ``0..n-1`` with no gaps or duplicates."""
    return sorted(orders) == list(range(len(orders)))
