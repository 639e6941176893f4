"""Base form for JSON API request bodies."""

from flask_wtf import FlaskForm


class ApiForm(FlaskForm):
    """FlaskForm that reads the JSON body and skips CSRF.

    API callers authenticate with bearer tokens, so there is no session to
    protect with a CSRF token.
    """

    class Meta:
        csrf = False
