from ballotbox.routes.admin import register_admin_routes
from ballotbox.routes.auth import register_auth_routes
from ballotbox.routes.errors import register_error_handlers
from ballotbox.routes.public import register_public_routes


def register_routes(app):
    register_error_handlers(app)
    register_auth_routes(app)
    register_public_routes(app)
    register_admin_routes(app)
