from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth.credentials import CredentialVerifier
from .auth.dependencies import require_user
from .auth.models import (
    LoginRequest,
    RegisterRequest,
    TokenClaims,
    TokenResponse,
    UserOut,
)
from .auth.users import UserService
from .config import DEFAULT_SETTINGS, Settings
from .errors import RecipeShareError
from .recipes.models import (
    CommentRequest,
    MessageResponse,
    RateRequest,
    RecipeFields,
    RecipeOut,
    ShareRequest,
)
from .recipes.service import RecipeService
from .storage.base import Database
from .storage.memory import InMemoryDatabase
from .storage.mongo import MongoDatabase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def open_database(settings: Settings) -> Database:
    """Connect to MongoDB when ``DB_URL`` is set, otherwise use the in-memory store."""
    if settings.db_url:
        database = MongoDatabase(settings.db_url, settings.db_name)
        database.ping()
        database.ensure_indexes()
        logger.info("Database connected (%s)", settings.db_name)
        return database
    logger.info("DB_URL not set, using in-memory store")
    return InMemoryDatabase()


def _user_service(request: Request) -> UserService:
    return request.app.state.user_service


def _recipe_service(request: Request) -> RecipeService:
    return request.app.state.recipe_service


# ── Auth endpoints ───────────────────────────────────────────────────────


@router.post("/register", status_code=201, response_model=TokenResponse)
def register(
    body: RegisterRequest,
    users: UserService = Depends(_user_service),
) -> TokenResponse:
    return TokenResponse(token=users.register(body.name, body.email, body.password))


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    users: UserService = Depends(_user_service),
) -> TokenResponse:
    return TokenResponse(token=users.login(body.email, body.password))


@router.get("/user", response_model=UserOut)
def current_user(
    claims: TokenClaims = Depends(require_user),
    users: UserService = Depends(_user_service),
) -> UserOut:
    return UserOut.from_user(users.get_user(claims.id))


# ── Recipe endpoints ─────────────────────────────────────────────────────


@router.get("/recipes", response_model=list[RecipeOut])
def list_recipes(
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> list[RecipeOut]:
    return recipes.list_recipes(claims.id)


@router.get("/recipes/{recipe_id}", response_model=RecipeOut)
def get_recipe(
    recipe_id: str,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.get_recipe(recipe_id)


@router.post("/recipes", status_code=201, response_model=RecipeOut)
def create_recipe(
    body: RecipeFields,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.create_recipe(claims.id, body)


@router.put("/recipes/{recipe_id}", response_model=RecipeOut)
def update_recipe(
    recipe_id: str,
    body: RecipeFields,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.update_recipe(claims.id, recipe_id, body)


@router.delete("/recipes/{recipe_id}", response_model=MessageResponse)
def delete_recipe(
    recipe_id: str,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> MessageResponse:
    recipes.delete_recipe(claims.id, recipe_id)
    return MessageResponse(message="Recipe deleted successfully")


@router.post("/recipes/{recipe_id}/share", response_model=RecipeOut)
def share_recipe(
    recipe_id: str,
    body: ShareRequest,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.share_recipe(claims.id, recipe_id, body.email)


@router.post("/recipes/{recipe_id}/rate", response_model=RecipeOut)
def rate_recipe(
    recipe_id: str,
    body: RateRequest,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.rate_recipe(claims.id, recipe_id, body.rating)


@router.post("/recipes/{recipe_id}/comment", status_code=201, response_model=RecipeOut)
def comment_on_recipe(
    recipe_id: str,
    body: CommentRequest,
    claims: TokenClaims = Depends(require_user),
    recipes: RecipeService = Depends(_recipe_service),
) -> RecipeOut:
    return recipes.comment_on_recipe(claims.id, recipe_id, body.text)


# ── Application ──────────────────────────────────────────────────────────


def create_app(
    settings: Settings = DEFAULT_SETTINGS,
    database: Database | None = None,
) -> FastAPI:
    """
    Build the API.

    The database is opened when the app starts and closed when it shuts down.
    Passing ``database`` skips ``open_database`` (tests use an in-memory one).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database if database is not None else open_database(settings)
        credentials = CredentialVerifier(
            settings.jwt_secret,
            ttl_seconds=settings.token_ttl_seconds,
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        app.state.credentials = credentials
        app.state.user_service = UserService(db.users, credentials)
        app.state.recipe_service = RecipeService(
            db.recipes,
            db.users,
            strict_rating_votes=settings.strict_rating_votes,
        )
        try:
            yield
        finally:
            db.close()
            logger.info("Database closed")

    app = FastAPI(title="Recipe Sharing API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecipeShareError)
    async def _service_error(request: Request, exc: RecipeShareError) -> JSONResponse:
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )

    @app.exception_handler(Exception)
    async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    logging.basicConfig(
        level=DEFAULT_SETTINGS.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=DEFAULT_SETTINGS.port)


if __name__ == "__main__":
    main()
