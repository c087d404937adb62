from __future__ import annotations

from typing import Protocol

from ..auth.models import User
from ..recipes.models import Recipe


class UserStore(Protocol):
    def get(self, user_id: str) -> User | None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def insert(self, user: User) -> None:
        """Persist a new user. Raises ``DuplicateEmailError`` if the email is taken."""
        ...


class RecipeStore(Protocol):
    def get(self, recipe_id: str) -> Recipe | None: ...

    def list_by_author(self, author_id: str) -> list[Recipe]: ...

    def insert(self, recipe: Recipe) -> None: ...

    def replace(self, recipe: Recipe, expected_version: int) -> bool:
        """Overwrite the stored recipe only if its version is still ``expected_version``."""
        ...

    def delete(self, recipe_id: str) -> bool: ...


class Database(Protocol):
    users: UserStore
    recipes: RecipeStore

    def close(self) -> None: ...
