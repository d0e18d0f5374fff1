from enum import Enum


class Unit(str, Enum):
    G = "G"
    KG = "KG"
    ML = "ML"
    L = "L"
    TSP = "TSP"
    TBSP = "TBSP"
    CUP = "CUP"
    PIECE = "PIECE"
    PINCH = "PINCH"


class RecipeStatus(str, Enum):
    DORMANT = "DORMANT"
    FULLY_STOCKED = "FULLY_STOCKED"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


DEFAULT_STATUS = RecipeStatus.DORMANT

DEFAULT_BOARD_TITLE = "Recipe Development"
DEFAULT_COLUMNS = [
    ("To Do", 5),
    ("In Progress", 3),
    ("Testing", 3),
    ("Completed", 5),
]


# ---- Serializers (snake_case rows to camelCase JSON) ----


def timestamp(value):
    return value.isoformat() if value is not None else None


def board_json(row, columns=None):
    data = {
        "id": row["id"],
        "title": row["title"],
        "ownerId": row["owner_id"],
        "createdAt": timestamp(row["created_at"]),
        "updatedAt": timestamp(row["updated_at"]),
    }
    if columns is not None:
        data["columns"] = columns
    return data


def column_json(row, cards=None):
    data = {
        "id": row["id"],
        "boardId": row["board_id"],
        "title": row["title"],
        "order": row["order"],
        "limit": row["card_limit"],
        "createdAt": timestamp(row["created_at"]),
        "updatedAt": timestamp(row["updated_at"]),
    }
    if cards is not None:
        data["cards"] = cards
    return data


def ingredient_json(row):
    return {
        "id": row["id"],
        "cardId": row["card_id"],
        "name": row["name"],
        "quantity": row["quantity"],
        "unit": row["unit"],
    }


def card_json(row, ingredients=None):
    data = {
        "id": row["id"],
        "columnId": row["column_id"],
        "title": row["title"],
        "description": row["description"],
        "status": row["status"],
        "instructions": list(row["instructions"] or []),
        "labels": list(row["labels"] or []),
        "order": row["order"],
        "createdAt": timestamp(row["created_at"]),
        "updatedAt": timestamp(row["updated_at"]),
    }
    if ingredients is not None:
        data["ingredients"] = [ingredient_json(i) for i in ingredients]
    return data
