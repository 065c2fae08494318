from flask import Flask

from ballotbox.config import Config
from ballotbox.extensions import db, login_manager, migrate
from ballotbox.models import User
from ballotbox.routes import register_routes


def create_app(config=None):
    app = Flask(
        __name__,
        template_folder="../templates",
    )
    app.config.from_object(Config)
    if config:
        app.config.update(config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.login_view = "login"
    login_manager.login_message = "Please log in to continue."
    login_manager.login_message_category = "error"

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    register_routes(app)
    return app


__all__ = ["db", "migrate", "create_app"]
