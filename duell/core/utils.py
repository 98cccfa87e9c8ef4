# duell/core/utils.py

import hashlib
from fastapi import Request


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def hash_ip(ip_address: str) -> str:
    # ratings are deduplicated per client without storing the raw address
    return hashlib.sha256(ip_address.encode("utf-8")).hexdigest()


def login_identifier(client_ip: str, username: str) -> str:
    return f"{client_ip}:{username}"


def detect_database_type(database_url: str) -> str:
    url = database_url or ""
    if "supabase.com" in url or "supabase.co" in url:
        return "Supabase"
    if "neon.tech" in url:
        return "Neon"
    if "railway.app" in url:
        return "Railway"
    if "render.com" in url:
        return "Render"
    if url.startswith("sqlite"):
        return "SQLite"
    if "127.0.0.1" in url or "localhost" in url or "@postgres:" in url:
        return "Lokal"
    if url:
        return "Extern"
    return "Lokal"
