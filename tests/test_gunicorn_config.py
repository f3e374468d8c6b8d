import os
import runpy
import unittest
from pathlib import Path
from unittest import mock

CONFIG_PATH = Path(__file__).resolve().parent.parent / "gunicorn.conf.py"


def load_settings(**env):
    with mock.patch.dict(os.environ, env, clear=True):
        return runpy.run_path(str(CONFIG_PATH))


class GunicornConfigTestCase(unittest.TestCase):
    def test_defaults_serve_the_app_factory(self):
        settings = load_settings()
        self.assertEqual(settings["wsgi_app"], "lifealign:create_app()")
        self.assertEqual(settings["bind"], "0.0.0.0:8000")
        self.assertEqual((settings["workers"], settings["threads"]), (2, 4))
        self.assertEqual(settings["loglevel"], "info")

    def test_environment_overrides_are_bounded(self):
        settings = load_settings(PORT="9000", WEB_CONCURRENCY="50", GUNICORN_THREADS="0", LOG_LEVEL="DEBUG")
        self.assertEqual(settings["bind"], "0.0.0.0:9000")
        self.assertEqual(settings["workers"], 8)
        self.assertEqual(settings["threads"], 1)
        self.assertEqual(settings["loglevel"], "debug")

    def test_unparseable_numbers_fall_back(self):
        settings = load_settings(GUNICORN_WORKERS="many", GUNICORN_TIMEOUT="")
        self.assertEqual(settings["workers"], 2)
        self.assertEqual(settings["timeout"], 30)


if __name__ == "__main__":
    unittest.main()
