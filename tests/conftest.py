import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from blog_service.db_context import DatabaseManager
from blog_service.schema import create_schema, truncate_all
from blog_service.services import PostService, UserService

TEST_DB = "test_db"


@pytest.fixture(scope="session")
def postgres_container():
    """Start a PostgreSQL test container for the session."""
    with PostgresContainer("postgres:17") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_dsn(postgres_container):
    host = postgres_container.get_container_host_ip()
    port = postgres_container.get_exposed_port(5432)
    return f"postgresql://{postgres_container.username}:{postgres_container.password}@{host}:{port}/{postgres_container.dbname}"


@pytest_asyncio.fixture
async def test_db_pool(postgres_dsn):
    """Fresh pool per test (each test runs on its own event loop), schema created, rows removed afterwards."""
    pool = await DatabaseManager.connect(postgres_dsn, TEST_DB, min_size=1, max_size=5)
    await create_schema(TEST_DB)

    yield pool

    await truncate_all(TEST_DB)
    await DatabaseManager.disconnect(TEST_DB)


@pytest.fixture
def user_service(test_db_pool):
    return UserService(db_name=TEST_DB)


@pytest.fixture
def post_service(test_db_pool):
    return PostService(db_name=TEST_DB)


@pytest_asyncio.fixture
async def author(user_service):
    return await user_service.create_user({"username": "dan", "password": "hunter2"})


@pytest_asyncio.fixture
async def other_author(user_service):
    return await user_service.create_user({"username": "mei", "password": "secret"})


@pytest_asyncio.fixture
async def sample_posts(post_service, author, other_author):
    """Three posts by `author` and one by `other_author`, created oldest first."""
    samples = [
        (author, {"title": "Learning Redux", "tags": ["redux"]}),
        (author, {"title": "Learn React Hooks", "tags": ["react"]}),
        (author, {"title": "Full-Stack React Projects", "tags": ["react", "nodejs"]}),
        (other_author, {"title": "Guide to TypeScript"}),
    ]
    return [await post_service.create_post(user.id, fields) for user, fields in samples]
