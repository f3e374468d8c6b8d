from flask import Flask
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from dotenv import load_dotenv

db = SQLAlchemy()
migrate = Migrate()


def create_app(test_config: dict | None = None) -> Flask:
    load_dotenv()

    app = Flask(__name__)
    app.config.from_object("lifealign.config.Config")
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(str(app.config.get("LOG_LEVEL") or "INFO").upper())

    db.init_app(app)
    migrate.init_app(app, db)

    from lifealign.routes import bp

    app.register_blueprint(bp)

    # Ensure model metadata is registered for migrations.
    from lifealign import models  # noqa: F401

    @app.after_request
    def apply_json_headers(response):
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        return response

    return app
