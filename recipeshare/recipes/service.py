from __future__ import annotations

import logging
from typing import Callable

from ..errors import ConflictError, ForbiddenError, NotFoundError
from ..storage.base import RecipeStore, UserStore
from .models import (
    Comment,
    CommentOut,
    Recipe,
    RecipeFields,
    RecipeOut,
    UserRef,
)

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 3


class RecipeService:
    """
    Ownership, sharing and rating rules for recipes.

    Every read-modify-write goes through ``_mutate``: the recipe is re-read,
    the checks are re-run and the result is written back only if nobody else
    wrote in between.
    """

    def __init__(
        self,
        recipes: RecipeStore,
        users: UserStore,
        strict_rating_votes: bool = False,
    ) -> None:
        self._recipes = recipes
        self._users = users
        self._strict_rating_votes = strict_rating_votes

    # ── Reads ────────────────────────────────────────────────────────────

    def list_recipes(self, caller_id: str) -> list[RecipeOut]:
        return [self._render(r) for r in self._recipes.list_by_author(caller_id)]

    def get_recipe(self, recipe_id: str) -> RecipeOut:
        return self._render(self._require(recipe_id))

    # ── Author operations ────────────────────────────────────────────────

    def create_recipe(self, caller_id: str, fields: RecipeFields) -> RecipeOut:
        recipe = Recipe(
            title=fields.title,
            description=fields.description,
            ingredients=list(fields.ingredients),
            instructions=list(fields.instructions),
            author=caller_id,
        )
        self._recipes.insert(recipe)
        logger.info("User %s created recipe %s", caller_id, recipe.id)
        return self._render(recipe)

    def update_recipe(self, caller_id: str, recipe_id: str, fields: RecipeFields) -> RecipeOut:
        def apply(recipe: Recipe) -> None:
            _require_author(recipe, caller_id, "edit")
            recipe.title = fields.title
            recipe.description = fields.description
            recipe.ingredients = list(fields.ingredients)
            recipe.instructions = list(fields.instructions)

        return self._render(self._mutate(recipe_id, apply))

    def delete_recipe(self, caller_id: str, recipe_id: str) -> None:
        recipe = self._require(recipe_id)
        _require_author(recipe, caller_id, "delete")
        self._recipes.delete(recipe_id)
        logger.info("User %s deleted recipe %s", caller_id, recipe_id)

    def share_recipe(self, caller_id: str, recipe_id: str, email: str) -> RecipeOut:
        def apply(recipe: Recipe) -> None:
            _require_author(recipe, caller_id, "share")
            target = self._users.get_by_email(email)
            if target is None:
                raise NotFoundError("User not found")
            if target.id in recipe.shared_with:
                raise ConflictError("Recipe already shared with this user")
            recipe.shared_with.append(target.id)

        recipe = self._mutate(recipe_id, apply)
        logger.info("Recipe %s shared by %s", recipe_id, caller_id)
        return self._render(recipe)

    # ── Operations open to other users ───────────────────────────────────

    def rate_recipe(self, caller_id: str, recipe_id: str, value: float) -> RecipeOut:
        def apply(recipe: Recipe) -> None:
            if recipe.author == caller_id:
                raise ConflictError("You cannot rate your own recipe")
            already_voted = caller_id in recipe.rating_count
            # A repeat vote is only refused once the rating has moved off zero,
            # unless the stricter policy is enabled.
            if already_voted and (self._strict_rating_votes or recipe.rating > 0):
                raise ConflictError("You have already rated this recipe")
            if not already_voted:
                recipe.rating_count.append(caller_id)
            recipe.rating = (recipe.rating + value) / len(recipe.rating_count)

        return self._render(self._mutate(recipe_id, apply))

    def comment_on_recipe(self, caller_id: str, recipe_id: str, text: str) -> RecipeOut:
        def apply(recipe: Recipe) -> None:
            recipe.comments.append(Comment(author=caller_id, text=text))

        return self._render(self._mutate(recipe_id, apply))

    # ── Helpers ──────────────────────────────────────────────────────────

    def _require(self, recipe_id: str) -> Recipe:
        recipe = self._recipes.get(recipe_id)
        if recipe is None:
            raise NotFoundError("Recipe not found")
        return recipe

    def _mutate(self, recipe_id: str, apply: Callable[[Recipe], None]) -> Recipe:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            recipe = self._require(recipe_id)
            expected = recipe.version
            apply(recipe)
            recipe.version = expected + 1
            if self._recipes.replace(recipe, expected_version=expected):
                return recipe
            logger.warning(
                "Recipe %s changed during write (attempt %d/%d)",
                recipe_id, attempt, MAX_WRITE_ATTEMPTS,
            )
        raise ConflictError("Recipe was modified concurrently")

    def _render(self, recipe: Recipe) -> RecipeOut:
        names: dict[str, str | None] = {}

        def ref(user_id: str) -> UserRef:
            if user_id not in names:
                user = self._users.get(user_id)
                names[user_id] = user.name if user else None
            return UserRef(id=user_id, name=names[user_id])

        return RecipeOut(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            ingredients=recipe.ingredients,
            instructions=recipe.instructions,
            rating=recipe.rating,
            rating_count=recipe.rating_count,
            author=ref(recipe.author),
            shared_with=recipe.shared_with,
            comments=[
                CommentOut(author=ref(c.author), text=c.text, created_at=c.created_at)
                for c in recipe.comments
            ],
        )


def _require_author(recipe: Recipe, caller_id: str, action: str) -> None:
    if recipe.author != caller_id:
        raise ForbiddenError(f"You are not authorized to {action} this recipe")
