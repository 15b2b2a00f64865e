"""
Inkpost Backend: Dependency Providers
=======================================

What:  FastAPI dependencies that build every component from Settings.
How:   Stateless components (token service, hasher, asset storage) are built
       once and cached; repositories and services are built per request
       around the request's database session.
Who:   Injected into route handlers via Depends(); tests replace individual
       providers through app.dependency_overrides.

Dependency Graph:
    get_db_session ─┬─▶ get_user_repository ─┐
                    │                        ├─▶ get_auth_service
    get_password_hasher ─────────────────────┤
    get_token_service ───────────────────────┘
                    └─▶ get_post_repository ─┐
    get_asset_storage ───────────────────────┴─▶ get_post_service
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.repositories.base import PostRepository, UserRepository
from app.repositories.posts import SqlAlchemyPostRepository
from app.repositories.users import SqlAlchemyUserRepository
from app.security.passwords import PasswordHasher
from app.security.tokens import TokenService
from app.services.asset_storage import AssetStorage, LocalAssetStorage
from app.services.auth_service import AuthService
from app.services.post_service import PostService


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expire_minutes,
    )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@lru_cache
def get_asset_storage() -> AssetStorage:
    return LocalAssetStorage(root=settings.storage_root, max_size=settings.max_file_size)


def get_user_repository(db: AsyncSession = Depends(get_db_session)) -> UserRepository:
    return SqlAlchemyUserRepository(db)


def get_post_repository(db: AsyncSession = Depends(get_db_session)) -> PostRepository:
    return SqlAlchemyPostRepository(db)


def get_auth_service(
    users: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(users=users, hasher=hasher, tokens=tokens)


def get_post_service(
    posts: PostRepository = Depends(get_post_repository),
    assets: AssetStorage = Depends(get_asset_storage),
) -> PostService:
    return PostService(posts=posts, assets=assets, list_limit=settings.posts_list_limit)
