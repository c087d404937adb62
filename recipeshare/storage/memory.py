from __future__ import annotations

import threading

from ..auth.models import User
from ..errors import DuplicateEmailError
from ..recipes.models import Recipe

# Records are copied on the way in and out so callers never alias stored state.


class InMemoryUserStore:
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._users: dict[str, User] = {}

    def get(self, user_id: str) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def get_by_email(self, email: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy(deep=True)
        return None

    def insert(self, user: User) -> None:
        with self._lock:
            if any(u.email == user.email for u in self._users.values()):
                raise DuplicateEmailError("Email already registered")
            self._users[user.id] = user.model_copy(deep=True)

    def clear(self) -> None:
        with self._lock:
            self._users.clear()


class InMemoryRecipeStore:
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._recipes: dict[str, Recipe] = {}

    def get(self, recipe_id: str) -> Recipe | None:
        with self._lock:
            recipe = self._recipes.get(recipe_id)
            return recipe.model_copy(deep=True) if recipe else None

    def list_by_author(self, author_id: str) -> list[Recipe]:
        with self._lock:
            return [
                r.model_copy(deep=True)
                for r in self._recipes.values()
                if r.author == author_id
            ]

    def insert(self, recipe: Recipe) -> None:
        with self._lock:
            self._recipes[recipe.id] = recipe.model_copy(deep=True)

    def replace(self, recipe: Recipe, expected_version: int) -> bool:
        with self._lock:
            current = self._recipes.get(recipe.id)
            if current is None or current.version != expected_version:
                return False
            self._recipes[recipe.id] = recipe.model_copy(deep=True)
            return True

    def delete(self, recipe_id: str) -> bool:
        with self._lock:
            return self._recipes.pop(recipe_id, None) is not None


class InMemoryDatabase:
    def __init__(self) -> None:
        lock = threading.Lock()
        self.users = InMemoryUserStore(lock)
        self.recipes = InMemoryRecipeStore(lock)

    def close(self) -> None:
        return None
