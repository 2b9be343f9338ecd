import unittest
from datetime import datetime, timedelta, UTC

from fastapi.testclient import TestClient
from sqlmodel import Session

from edublog.auth.auth_handler import TokenService, get_password_hash
from edublog.configs.database import init_db, make_engine
from edublog.configs.settings import Settings
from edublog.main import create_app
from edublog.models import Post, PostStatus, User, UserRole

TEST_SECRET = "test-secret-key"
PASSWORD = "senha123"


def make_settings(**overrides) -> Settings:
    values = {"DATABASE_URL": "sqlite://", "JWT_SECRET": TEST_SECRET, "LOG_LEVEL": "WARNING"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def create_user(db, email, name, role=UserRole.student, password=PASSWORD, is_active=True) -> User:
    user = User(email=email, name=name, password_hash=get_password_hash(password), role=role,
                is_active=is_active)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_post(db, title="Intro to Algebra", author="Prof. Silva", status=PostStatus.published,
                tags=None, content="Lesson notes", category="Math", age_minutes=0) -> Post:
    post = Post(title=title, content=content, author=author, category=category, tags=tags or [],
                status=status, published=status == PostStatus.published,
                created_at=datetime.now(UTC) - timedelta(minutes=age_minutes))
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


class ServiceTestCase(unittest.TestCase):
    """Fresh in-memory database per test."""

    def setUp(self):
        self.settings = make_settings()
        self.engine = make_engine(self.settings)
        init_db(self.engine)
        self.db = Session(self.engine)
        self.tokens = TokenService(self.settings)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()


class ApiTestCase(unittest.TestCase):
    """Drives the real app over an in-memory database."""

    def setUp(self):
        self.app = create_app(make_settings())
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def session(self) -> Session:
        return Session(self.app.state.engine)

    def register(self, email, name, role="student", password=PASSWORD):
        response = self.client.post("/auth/register", json={
            "email": email, "name": name, "password": password, "role": role,
        })
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def login(self, email, password=PASSWORD) -> dict:
        response = self.client.post("/auth/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['data']['accessToken']}"}

    def create_admin(self, email="admin@escola.com", name="Administrator") -> dict:
        with self.session() as db:
            create_user(db, email, name, role=UserRole.admin)
        return self.login(email)
