import os
from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.session import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from tests.utils.factories import create_course_factory, create_user_factory  # noqa: E402
from tests.utils.helpers import create_token_for  # noqa: E402


@pytest.fixture(scope="session")
def test_database_url():
    """SQLite in memory by default; ``TEST_DATABASE=postgres`` runs against a container."""
    if os.getenv("TEST_DATABASE") != "postgres":
        yield "sqlite://"
        return

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer("postgres:16")
    container.with_exposed_ports(5432)
    container.with_env("POSTGRES_USER", "test")
    container.with_env("POSTGRES_PASSWORD", "test")
    container.with_env("POSTGRES_DB", "test")

    container.start()
    wait_for_logs(container, "database system is ready to accept connections", timeout=30)

    host = container.get_container_host_ip()
    port = container.get_exposed_port(5432)
    yield f"postgresql://test:test@{host}:{port}/test"
    container.stop()


@pytest.fixture
def test_engine(test_database_url):
    if test_database_url.startswith("sqlite"):
        engine = create_engine(
            test_database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(test_database_url)

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    session = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
async def test_app(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def student(db_session):
    return create_user_factory(db_session, email="student@example.com", name="Sam Student")


@pytest.fixture
def other_student(db_session):
    return create_user_factory(db_session, email="other@example.com", name="Olu Other")


@pytest.fixture
def instructor(db_session):
    return create_user_factory(
        db_session, email="instructor@example.com", name="Ida Instructor", role="instructor"
    )


@pytest.fixture
def course(db_session):
    return create_course_factory(
        db_session,
        title="Python Basics",
        subtitle="From zero to scripts",
        description="Variables, loops and functions",
        lectures=["Variables", "Loops", "Functions"],
    )


@pytest.fixture
def student_token(student):
    return create_token_for(student)


@pytest.fixture
def instructor_token(instructor):
    return create_token_for(instructor)
