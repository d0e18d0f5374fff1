from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt as pyjwt
from flask import current_app, request
from svix.webhooks import Webhook, WebhookVerificationError

from recipeboard import config
from recipeboard.errors import Unauthenticated, ValidationError


def create_token(user_id, secret=None, expires_in=None):
    """Mint a bearer token the way the identity provider does (dev and tests)."""
    payload = {
        "sub": user_id,
        "exp": datetime.now(timezone.utc)
        + (expires_in or timedelta(days=config.TOKEN_EXPIRY_DAYS)),
    }
    return pyjwt.encode(payload, secret or config.SECRET_KEY, algorithm="HS256")


def decode_token(token, secret):
    try:
        payload = pyjwt.decode(token, secret, algorithms=["HS256"])
    except pyjwt.ExpiredSignatureError:
        raise Unauthenticated("Token expired") from None
    except pyjwt.InvalidTokenError:
        raise Unauthenticated("Invalid token") from None
    user_id = payload.get("sub")
    if not user_id:
        raise Unauthenticated("Invalid token")
    return user_id


def require_auth(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            raise Unauthenticated("Authentication required")
        request.user_id = decode_token(auth_header[7:], current_app.config["SECRET_KEY"])
        return f(*args, **kwargs)

    return decorated


def verify_webhook(body, headers, secret):
    """Check the identity provider's svix signature and return the parsed event."""
    if not secret:
        raise ValidationError("Webhook verification failed")
    svix_headers = {k.lower(): v for k, v in headers.items()}
    try:
        return Webhook(secret).verify(body, svix_headers)
    except WebhookVerificationError:
        raise ValidationError("Webhook verification failed") from None
    except ValueError:
        raise ValidationError("Request body must be a JSON object") from None
