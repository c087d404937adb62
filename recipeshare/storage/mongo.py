from __future__ import annotations

import logging
from typing import Any

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from ..auth.models import User
from ..errors import DuplicateEmailError
from ..recipes.models import Recipe

logger = logging.getLogger(__name__)


def _to_document(record: User | Recipe) -> dict[str, Any]:
    doc = record.model_dump()
    doc["_id"] = doc.pop("id")
    return doc


def _from_document(doc: dict[str, Any]) -> dict[str, Any]:
    data = {k: v for k, v in doc.items() if k != "_id"}
    data["id"] = str(doc["_id"])
    return data


class MongoUserStore:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def get(self, user_id: str) -> User | None:
        doc = self._col.find_one({"_id": user_id})
        return User.model_validate(_from_document(doc)) if doc else None

    def get_by_email(self, email: str) -> User | None:
        doc = self._col.find_one({"email": email})
        return User.model_validate(_from_document(doc)) if doc else None

    def insert(self, user: User) -> None:
        try:
            self._col.insert_one(_to_document(user))
        except DuplicateKeyError as exc:
            raise DuplicateEmailError("Email already registered") from exc


class MongoRecipeStore:
    def __init__(self, collection: Collection) -> None:
        self._col = collection

    def get(self, recipe_id: str) -> Recipe | None:
        doc = self._col.find_one({"_id": recipe_id})
        return Recipe.model_validate(_from_document(doc)) if doc else None

    def list_by_author(self, author_id: str) -> list[Recipe]:
        return [
            Recipe.model_validate(_from_document(doc))
            for doc in self._col.find({"author": author_id})
        ]

    def insert(self, recipe: Recipe) -> None:
        self._col.insert_one(_to_document(recipe))

    def replace(self, recipe: Recipe, expected_version: int) -> bool:
        result = self._col.replace_one(
            {"_id": recipe.id, "version": expected_version},
            _to_document(recipe),
        )
        return result.matched_count == 1

    def delete(self, recipe_id: str) -> bool:
        return self._col.delete_one({"_id": recipe_id}).deleted_count == 1


class MongoDatabase:
    """Users and recipes collections in one MongoDB database."""

    def __init__(self, url: str, name: str, client: MongoClient | None = None) -> None:
        self._client = client if client is not None else MongoClient(url, tz_aware=True)
        db = self._client[name]
        self._users_col = db["users"]
        self._recipes_col = db["recipes"]
        self.users = MongoUserStore(self._users_col)
        self.recipes = MongoRecipeStore(self._recipes_col)

    def ensure_indexes(self) -> None:
        self._users_col.create_index([("email", ASCENDING)], unique=True)
        self._recipes_col.create_index([("author", ASCENDING)])

    def ping(self) -> None:
        self._client.admin.command("ping")

    def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed")
