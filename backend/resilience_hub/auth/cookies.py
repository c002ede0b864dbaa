"""
ResilienceHub Backend — Session Cookie Policy
=============================================

What:  Issues and clears the session cookie.
How:   Both operations share one attribute set (path, domain, secure,
       httponly, samesite) built from settings. Browsers only delete a cookie
       when the clearing Set-Cookie matches the attributes it was set with.

Attributes:
    httponly  always
    path      "/"
    max_age   SESSION_TTL_DAYS (7) or REMEMBER_ME_TTL_DAYS (30); omitted on clear
    secure    COOKIE_SECURE
    samesite  COOKIE_SAMESITE (lax | strict | none)
    domain    COOKIE_DOMAIN (host-only when unset)
"""

from typing import Any, Dict

from starlette.responses import Response

from resilience_hub.config import settings

COOKIE_PATH = "/"


def cookie_attributes() -> Dict[str, Any]:
    return {
        "path": COOKIE_PATH,
        "domain": settings.cookie_domain,
        "secure": settings.cookie_secure,
        "httponly": True,
        "samesite": settings.cookie_samesite,
    }


def session_max_age(remember: bool = False) -> int:
    days = settings.remember_me_ttl_days if remember else settings.session_ttl_days
    return days * 24 * 60 * 60


def set_session_cookie(response: Response, token: str, remember: bool = False) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=session_max_age(remember),
        **cookie_attributes(),
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.session_cookie_name, **cookie_attributes())
