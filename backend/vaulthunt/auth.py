"""Shared-secret checks for the regular and admin endpoints.

Secrets travel in the query string (``?secret=``) and, for POST requests,
optionally in the JSON body.
"""
import hmac

from flask import current_app, request


def _matches(candidate, expected):
    if not candidate or not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode(), expected.encode())


def validate_secret(body_secret=None):
    expected = current_app.config.get('APP_SECRET')
    # No secret configured: development mode
    if not expected:
        return True
    return _matches(request.args.get('secret'), expected) or _matches(body_secret, expected)


def validate_admin_secret(body_secret=None):
    """Admin secret when configured, otherwise the regular secret."""
    admin_secret = current_app.config.get('ADMIN_SECRET')
    if not admin_secret:
        return validate_secret(body_secret)
    candidates = (
        request.args.get('secret'),
        request.args.get('adminSecret'),
        request.args.get('admin_secret'),
        body_secret,
    )
    return any(_matches(c, admin_secret) for c in candidates)


def tokens_match(candidate, expected):
    return _matches(candidate, expected or '')
