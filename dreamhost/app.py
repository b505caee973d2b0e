import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable

from databases import Database
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from dreamhost import config, db
from dreamhost.auth import AuthMiddleware, correct_user, create_token, logged_in
from dreamhost.domain.errors import BadRequestError, DreamHostError, NotFoundError
from dreamhost.domain.models import RecipeKind
from dreamhost.domain.repository import RecipesRepository
from dreamhost.domain.users import UsersRepository
from dreamhost.schemas import (
    NEW,
    SEARCH,
    UPDATE,
    Schema,
    UserAuth,
    UserRegister,
    UserUpdate,
)


CONFIG = config.Config()


logger = logging.getLogger(__name__)


def aJSONResponse(route: Callable[..., Awaitable[Any | tuple[Any, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> JSONResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            content, code = resp, 200
        else:
            content, code = resp
        return JSONResponse(content, status_code=code)

    return wrapper


def validate[S: Schema](schema: type[S], data: Any) -> S:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errs = [
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            if err["loc"]
            else err["msg"]
            for err in e.errors()
        ]
        raise BadRequestError(errs) from None


async def body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise BadRequestError("Request body must be JSON") from None


def database(request: Request) -> Database:
    return request.app.state.db


def users(request: Request) -> UsersRepository:
    return UsersRepository(
        database(request), work_factor=request.app.state.config.work_factor
    )


def token_for(request: Request, username: str) -> str:
    cfg: config.Config = request.app.state.config
    return create_token(username, secret=cfg.secret_key, ttl=cfg.token_ttl)


def recipe_kind(request: Request) -> RecipeKind:
    try:
        return RecipeKind(request.path_params["kind"])
    except ValueError:
        raise NotFoundError(f"No recipe type: {request.path_params['kind']}") from None


# Auth


@aJSONResponse
async def auth_token(request: Request) -> dict[str, str]:
    """POST { username, password } => { token }"""
    creds = validate(UserAuth, await body(request))
    user = await users(request).authenticate(creds.username, creds.password)
    return {"token": token_for(request, user.username)}


@aJSONResponse
async def auth_register(request: Request) -> tuple[dict[str, str], int]:
    """POST { username, password, firstName, lastName, email } => { token }"""
    data = validate(UserRegister, await body(request))
    user = await users(request).register(data.fields())
    return {"token": token_for(request, user.username)}, 201


# Meals and drinks


def recipe_routes(kind: RecipeKind) -> list[Route]:
    """The same six endpoints for meals and for drinks.

    Reads are open to anyone; writes need a logged in user.
    """

    def repo(request: Request) -> RecipesRepository:
        return RecipesRepository(database(request), kind)

    @aJSONResponse
    async def find_all(request: Request) -> dict[str, Any]:
        filters = validate(SEARCH[kind], dict(request.query_params))
        recipes = await repo(request).find_all(filters.model_dump(exclude_none=True))
        return {kind.value: [r.to_dict() for r in recipes]}

    @aJSONResponse
    @logged_in
    async def create(request: Request) -> tuple[dict[str, Any], int]:
        data = validate(NEW[kind], await body(request))
        recipe = await repo(request).create(data.fields())
        return {kind.label: recipe.to_dict()}, 201

    @aJSONResponse
    async def categories(request: Request) -> dict[str, Any]:
        return {"categories": await repo(request).categories()}

    @aJSONResponse
    async def get(request: Request) -> dict[str, Any]:
        recipe = await repo(request).get(request.path_params["id"])
        return {kind.label: recipe.to_dict()}

    @aJSONResponse
    @logged_in
    async def update(request: Request) -> dict[str, Any]:
        data = validate(UPDATE[kind], await body(request))
        recipe = await repo(request).update(request.path_params["id"], data.fields())
        return {kind.label: recipe.to_dict()}

    @aJSONResponse
    @logged_in
    async def remove(request: Request) -> dict[str, int]:
        id = request.path_params["id"]
        await repo(request).remove(id)
        return {"deleted": id}

    return [
        Route(f"/{kind.value}", find_all, methods=["GET"]),
        Route(f"/{kind.value}", create, methods=["POST"]),
        Route(f"/{kind.value}/categories", categories, methods=["GET"]),
        Route(f"/{kind.value}/{{id:int}}", get, methods=["GET"]),
        Route(f"/{kind.value}/{{id:int}}", update, methods=["PATCH"]),
        Route(f"/{kind.value}/{{id:int}}", remove, methods=["DELETE"]),
    ]


# Users


@aJSONResponse
@logged_in
async def user_list(request: Request) -> dict[str, Any]:
    return {"users": [u.to_dict() for u in await users(request).find_all()]}


@aJSONResponse
@correct_user
async def user_detail(request: Request) -> dict[str, Any]:
    """{ user } with favMeals and favDrinks as lists of ids."""
    user = await users(request).get(request.path_params["username"])
    return {"user": user.to_dict()}


@aJSONResponse
@correct_user
async def user_update(request: Request) -> dict[str, Any]:
    data = validate(UserUpdate, await body(request))
    user = await users(request).update(request.path_params["username"], data.fields())
    return {"user": user.to_dict()}


@aJSONResponse
@correct_user
async def user_remove(request: Request) -> dict[str, str]:
    username = request.path_params["username"]
    await users(request).remove(username)
    return {"deleted": username}


@aJSONResponse
@correct_user
async def personal_list(request: Request) -> dict[str, Any]:
    recipes = await users(request).get_personal_recipes(
        recipe_kind(request), request.path_params["username"]
    )
    return {"personalRecipes": [r.to_dict() for r in recipes]}


@aJSONResponse
@correct_user
async def personal_create(request: Request) -> tuple[dict[str, Any], int]:
    kind = recipe_kind(request)
    data = validate(NEW[kind], await body(request))
    recipe = await users(request).create_personal_recipe(
        kind, request.path_params["username"], data.fields()
    )
    return {"personalRecipe": recipe.to_dict()}, 201


@aJSONResponse
@correct_user
async def personal_detail(request: Request) -> dict[str, Any]:
    recipe = await users(request).get_personal_recipe(
        recipe_kind(request),
        request.path_params["username"],
        request.path_params["id"],
    )
    return {"personalRecipe": recipe.to_dict()}


@aJSONResponse
@correct_user
async def personal_update(request: Request) -> dict[str, Any]:
    kind = recipe_kind(request)
    data = validate(UPDATE[kind], await body(request))
    recipe = await users(request).update_personal_recipe(
        kind,
        request.path_params["username"],
        request.path_params["id"],
        data.fields(),
    )
    return {"personalRecipe": recipe.to_dict()}


@aJSONResponse
@correct_user
async def personal_remove(request: Request) -> dict[str, int]:
    id = request.path_params["id"]
    await users(request).remove_personal_recipe(
        recipe_kind(request), request.path_params["username"], id
    )
    return {"deleted": id}


@aJSONResponse
@correct_user
async def favorite(request: Request) -> dict[str, Any]:
    """POST /users/{username}/{kind}/{id}/add|remove"""
    kind = recipe_kind(request)
    username = request.path_params["username"]
    id = request.path_params["id"]
    match request.path_params["action"]:
        case "add":
            await users(request).mark_favorite(kind, username, id)
            favorited = True
        case "remove":
            await users(request).unmark_favorite(kind, username, id)
            favorited = False
        case action:
            raise BadRequestError(f"Unknown action: {action}")
    return {"favorited": favorited, f"{kind.label}Id": id}


# Errors


def error_response(message: Any, status: int) -> JSONResponse:
    return JSONResponse(
        {"error": {"message": message, "status": status}}, status_code=status
    )


async def domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, DreamHostError)
    return error_response(exc.message, exc.status)


async def http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, HTTPException)
    return error_response(exc.detail, exc.status_code)


async def internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response("Internal Server Error", 500)


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    cfg: config.Config = app.state.config
    logging.basicConfig(level=cfg.log_level)
    logger.info(
        "DreamHost config: env=%s db=%s bcrypt_work_factor=%s",
        cfg.env.value,
        app.state.db.url.obscure_password,
        cfg.work_factor,
    )
    await app.state.db.connect()
    await db.create_db(app.state.db)
    yield
    await app.state.db.disconnect()


app = Starlette(
    routes=[
        Route("/auth/token", auth_token, methods=["POST"]),
        Route("/auth/register", auth_register, methods=["POST"]),
        *recipe_routes(RecipeKind.meals),
        *recipe_routes(RecipeKind.drinks),
        Route("/users", user_list, methods=["GET"]),
        Route("/users/{username}", user_detail, methods=["GET"]),
        Route("/users/{username}", user_update, methods=["PATCH"]),
        Route("/users/{username}", user_remove, methods=["DELETE"]),
        Route("/users/{username}/{kind}/personal", personal_list, methods=["GET"]),
        Route("/users/{username}/{kind}/personal", personal_create, methods=["POST"]),
        Route(
            "/users/{username}/{kind}/personal/{id:int}",
            personal_detail,
            methods=["GET"],
        ),
        Route(
            "/users/{username}/{kind}/personal/{id:int}",
            personal_update,
            methods=["PATCH"],
        ),
        Route(
            "/users/{username}/{kind}/personal/{id:int}",
            personal_remove,
            methods=["DELETE"],
        ),
        Route(
            "/users/{username}/{kind}/{id:int}/{action}",
            favorite,
            methods=["POST"],
        ),
    ],
    middleware=[
        Middleware(
            CORSMiddleware,
            allow_origins=CONFIG.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        Middleware(AuthMiddleware),
    ],
    exception_handlers={
        DreamHostError: domain_error,
        HTTPException: http_error,
        Exception: internal_error,
    },
    lifespan=lifespan,
)

app.state.config = CONFIG
app.state.db = db.db
