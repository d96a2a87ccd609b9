"""
ledshop/catalog/client.py
-------------------------
Thin JSON-over-HTTPS client for the point-of-sale (Square) REST API.

Every call reads its credentials from current_app.config, so it must run
inside an app context. Failures surface as CatalogError; callers decide
whether that is fatal.
"""
import json
import logging
import urllib.error
import urllib.request

from flask import current_app

logger = logging.getLogger(__name__)

PRODUCTION_BASE_URL = 'https://connect.squareup.com'
SANDBOX_BASE_URL    = 'https://connect.squareupsandbox.com'


class CatalogError(Exception):
    """The catalog API could not be reached or answered with an error."""

    def __init__(self, message, status=None, details=None):
        super().__init__(message)
        self.status = status
        self.details = details


class CatalogConfigError(CatalogError):
    """Credentials are missing from the configuration."""


def base_url() -> str:
    if current_app.config.get('SQUARE_ENVIRONMENT') == 'production':
        return PRODUCTION_BASE_URL
    return SANDBOX_BASE_URL


def square_request(method: str, path: str, body: dict = None) -> dict:
    """
    Send one request and return the decoded JSON body.
    Raises CatalogError on transport errors and non-2xx answers.
    """
    token = current_app.config.get('SQUARE_ACCESS_TOKEN')
    if not token:
        raise CatalogConfigError('SQUARE_ACCESS_TOKEN is not configured')

    headers = {
        'Authorization':  f'Bearer {token}',
        'Square-Version': current_app.config['SQUARE_API_VERSION'],
        'Content-Type':   'application/json',
        'Accept':         'application/json',
    }
    data = None
    if body is not None and method in ('POST', 'PUT', 'PATCH'):
        data = json.dumps(body).encode('utf-8')

    req = urllib.request.Request(base_url() + path, data=data, headers=headers, method=method)
    timeout = current_app.config.get('SQUARE_TIMEOUT', 30)

    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except urllib.error.HTTPError as e:
        payload = e.read().decode('utf-8', errors='replace')
        try:
            details = json.loads(payload).get('errors')
        except ValueError:
            details = payload or None
        logger.error(f"Square API {method} {path} failed: {e.code} {details}")
        raise CatalogError(f'Square API error: {e.code}', status=e.code, details=details) from e
    except urllib.error.URLError as e:
        logger.error(f"Square API {method} {path} unreachable: {e.reason}")
        raise CatalogError(f'Square API unreachable: {e.reason}') from e

    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise CatalogError('Square API returned invalid JSON') from e
