import pytest

from storefront.app.models import Base
from storefront.app.repositories.users import UserRepository
from storefront.app.schemas import UserCreate
from storefront.app.services.users import UserService
from storefront.common import (
    ConflictError,
    ServiceSettings,
    create_schema,
    dispose_engines,
    get_session_factory,
    lifespan_session,
)

SETTINGS = ServiceSettings(enable_metrics=False)


class UnseenEmailRepository(UserRepository):
    """Reports every email as free, as a request racing another registration would see it."""

    async def get_by_email(self, email: str):
        return None


async def _session_factory(tmp_path):
    database_url = f"sqlite+aiosqlite:///{tmp_path / 'user_service.db'}"
    await create_schema(database_url, Base.metadata)
    return get_session_factory(database_url)


@pytest.mark.asyncio
async def test_duplicate_email_on_insert_is_a_conflict(tmp_path) -> None:
    session_factory = await _session_factory(tmp_path)
    payload = UserCreate(name="Ada", email="ada@example.com", password="secret-pass")

    async with lifespan_session(session_factory) as session:
        registered = await UserService(UserRepository(session), SETTINGS).register(payload)
        assert registered.user.id is not None

    async with lifespan_session(session_factory) as session:
        service = UserService(UnseenEmailRepository(session), SETTINGS)
        with pytest.raises(ConflictError, match="User already exists"):
            await service.register(payload)

    async with lifespan_session(session_factory) as session:
        repository = UserRepository(session)
        assert (await repository.get_user(registered.user.id)).email == "ada@example.com"

    await dispose_engines()
