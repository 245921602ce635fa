from __future__ import annotations

from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

ASYNC_DRIVER_SCHEME = "postgresql+asyncpg"
_POSTGRES_SCHEMES = {"postgres", "postgresql", "postgresql+psycopg", "postgresql+psycopg2", ASYNC_DRIVER_SCHEME}


def build_database_url(*, host: str, port: int, user: str, password: str, name: str) -> str:
    credentials = f"{quote(user, safe='')}:{quote(password, safe='')}"
    return f"{ASYNC_DRIVER_SCHEME}://{credentials}@{host}:{port}/{name}"


def normalize_database_url(url: str) -> str:
    """Point any Postgres URL at the asyncpg driver; other URLs pass through."""
    url = (url or "").strip()
    if not url:
        return url

    parts = urlsplit(url)
    if parts.scheme not in _POSTGRES_SCHEMES:
        return url

    # asyncpg rejects libpq's sslmode; it understands ssl=<mode> instead.
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    if "sslmode" in query:
        sslmode = query.pop("sslmode").lower().strip()
        if "ssl" not in query and sslmode != "disable":
            query["ssl"] = sslmode

    new_query = urlencode(query, doseq=True)
    return urlunsplit((ASYNC_DRIVER_SCHEME, parts.netloc, parts.path, new_query, parts.fragment))
