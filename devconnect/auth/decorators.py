"""Decorators for the auth blueprint."""

from functools import wraps

from flask import g

from devconnect.errors import AuthenticationRequiredError, NotAuthorizedError


def login_required(f=None, admin_required=False):
    """Reject the request unless a verified user was loaded for it.

    Usage:
    @login_required
    def protected_view():
        ...

    @login_required(admin_required=True)
    def admin_view():
        ...
    """

    def decorator(func):
        @wraps(func)
        def decorated_function(*args, **kwargs):
            if g.get("user") is None:
                raise AuthenticationRequiredError()
            if admin_required and not g.user.get("isAdmin"):
                raise NotAuthorizedError("Admin access required")
            return func(*args, **kwargs)

        return decorated_function

    if f:
        return decorator(f)
    return decorator
