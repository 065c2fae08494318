from flask_login import current_user

from ballotbox.models import ROLE_ADMIN


def get_current_user():
    if current_user and current_user.is_authenticated:
        return current_user
    return None


def has_role(user, role):
    return user is not None and getattr(user, "role", None) == role


def is_admin(user):
    return has_role(user, ROLE_ADMIN)
