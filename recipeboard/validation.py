import math
from numbers import Real

from recipeboard.errors import ValidationError
from recipeboard.models import RecipeStatus, Unit


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def require_object(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_title(data, field="title"):
    value = data.get(field)
    title = value.strip() if isinstance(value, str) else ""
    if not title:
        raise ValidationError("Title is required")
    return title


def require_id(data, field):
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def optional_text(data, field):
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value.strip() or None


def parse_order(value, field="order"):
    if not _is_int(value) or value < 0:
        raise ValidationError(f"{field} must be a non-negative integer")
    return value


def parse_limit(value):
    if value is None:
        return None
    if not _is_int(value) or value < 0:
        raise ValidationError("limit must be a non-negative integer or null")
    return value


def parse_status(value):
    try:
        return RecipeStatus(value).value
    except ValueError:
        raise ValidationError(
            "Invalid status",
            details={"allowed": [s.value for s in RecipeStatus]},
        ) from None


def parse_instructions(value):
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        raise ValidationError("instructions must be a list of strings")
    return list(value)


def parse_labels(value):
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        raise ValidationError("labels must be a list of strings")
    labels = []
    for label in value:
        label = label.strip()
        if label and label not in labels:
            labels.append(label)
    return labels


def _parse_quantity(value):
    """Return ``value`` as a finite non-negative float, or None."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return None
    try:
        quantity = float(value)
    except OverflowError:
        return None
    # NaN and Infinity parse from JSON but cannot be written back out.
    if not math.isfinite(quantity) or quantity < 0:
        return None
    return quantity


def parse_ingredients(value):
    if not isinstance(value, list):
        raise ValidationError("ingredients must be a list")
    ingredients = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValidationError(f"ingredients[{index}] must be an object")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"ingredients[{index}].name is required")
        quantity = _parse_quantity(item.get("quantity"))
        if quantity is None:
            raise ValidationError(
                f"ingredients[{index}].quantity must be a non-negative number"
            )
        try:
            unit = Unit(item.get("unit")).value
        except ValueError:
            raise ValidationError(
                f"ingredients[{index}].unit is invalid",
                details={"allowed": [u.value for u in Unit]},
            ) from None
        ingredients.append({"name": name.strip(), "quantity": quantity, "unit": unit})
    return ingredients


def parse_order_entries(value, field, with_column=False):
    """Parse ``[{id, order}]`` (or ``[{id, order, columnId}]``) reorder lists."""
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a list")
    entries = []
    seen = set()
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValidationError(f"{field}[{index}] must be an object")
        entry = {
            "id": require_id(item, "id"),
            "order": parse_order(item.get("order"), f"{field}[{index}].order"),
        }
        if with_column:
            entry["columnId"] = require_id(item, "columnId")
        if entry["id"] in seen:
            raise ValidationError(f"Duplicate id in {field}: {entry['id']}")
        seen.add(entry["id"])
        entries.append(entry)
    return entries
