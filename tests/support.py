import tempfile
import unittest
from pathlib import Path
from uuid import uuid4

from lifealign import create_app, db


class AppTestCase(unittest.TestCase):
    """Fresh schema per test on a temp-file SQLite database."""

    @classmethod
    def setUpClass(cls):
        cls.db_file = Path(tempfile.gettempdir()) / f"lifealign-{cls.__name__.lower()}-{uuid4().hex}.db"
        cls.app = create_app(
            {
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{cls.db_file.as_posix()}",
                "TESTING": True,
                "TEMPLATE_SELECTION": "modulo",
            }
        )

    @classmethod
    def tearDownClass(cls):
        with cls.app.app_context():
            db.session.remove()
            db.engine.dispose()
        if cls.db_file.exists():
            try:
                cls.db_file.unlink()
            except PermissionError:
                pass

    def setUp(self):
        with self.app.app_context():
            db.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def create_user(self, email: str, **extra) -> int:
        response = self.client.post("/api/users", json={"email": email, **extra})
        self.assertEqual(response.status_code, 201, response.get_json())
        return response.get_json()["id"]

    def auth(self, user_id: int) -> dict:
        return {"X-User-Id": str(user_id)}
