"""
Talkgroup directory refresh.

Downloads the Brandmeister talkgroup list (primary URL, then one fallback),
parses it, derives country and continent for every talkgroup and upserts the
result by talkgroup id. A failed refresh writes nothing.

Accepted documents:
- CSV with a header row (id/name/country columns, several header spellings)
- JSON object mapping talkgroup id to name, as served by the Brandmeister API
- JSON list of objects carrying id and name keys
"""
import csv
import io
import json
import logging
from typing import Any, Optional

import httpx
import sentry_sdk
from sqlalchemy.ext.asyncio import async_sessionmaker

from lastheard.core.config import Settings, get_settings
from lastheard.data import (
    COUNTRY_NAMES, COUNTRY_TO_CONTINENT, TALKGROUP_PREFIXES, GLOBAL, UNKNOWN
)
from lastheard.repositories import TalkgroupRepository

logger = logging.getLogger(__name__)

ID_COLUMNS = ("talkgroup_id", "talkgroup", "tg", "tgid", "tg_id", "id")
NAME_COLUMNS = ("name", "talkgroup_name", "description")
COUNTRY_COLUMNS = ("country", "country_code")


def resolve_country(talkgroup_id: int) -> str:
    """Derive a country code from the Brandmeister talkgroup numbering plan."""
    if 46600 <= talkgroup_id <= 46699:
        return "TW"
    if 250000 <= talkgroup_id <= 250999:
        return "RU"
    if (
        1 <= talkgroup_id <= 99
        or 900 <= talkgroup_id <= 999
        or 8000 <= talkgroup_id <= 8999
        or 9000 <= talkgroup_id <= 99999
    ):
        return GLOBAL

    digits = str(talkgroup_id)
    if len(digits) < 3:
        return GLOBAL
    for size in (4, 3, 2):
        code = TALKGROUP_PREFIXES.get(digits[:size])
        if code:
            return code
    return UNKNOWN


def continent_for(country: Optional[str]) -> Optional[str]:
    if not country:
        return None
    return COUNTRY_TO_CONTINENT.get(country) or (GLOBAL if country == GLOBAL else None)


def normalize_country(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    if value.lower() == GLOBAL.lower():
        return GLOBAL
    return value.upper()


def build_entry(talkgroup_id: Any, name: Any, country: Any = None) -> Optional[dict]:
    """Build a directory row, or None if the id or name is unusable."""
    try:
        tg_id = int(str(talkgroup_id).strip())
    except (TypeError, ValueError):
        return None
    if tg_id <= 0 or not isinstance(name, str) or not name.strip():
        return None

    code = normalize_country(country) or resolve_country(tg_id)
    return {
        "talkgroup_id": tg_id,
        "name": name.strip(),
        "country": code,
        "continent": continent_for(code),
        "full_country_name": COUNTRY_NAMES.get(code, code),
    }


def _pick(row: dict, aliases: tuple[str, ...]) -> Any:
    for alias in aliases:
        if alias in row and row[alias] not in (None, ""):
            return row[alias]
    return None


def parse_csv_directory(text: str) -> list[dict]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise ValueError("CSV document has no header row")

    headers = {(h or "").strip().lower() for h in reader.fieldnames}
    if not headers & set(ID_COLUMNS) or not headers & set(NAME_COLUMNS):
        raise ValueError(f"CSV header lacks talkgroup id/name columns: {sorted(headers)}")

    entries = []
    for raw in reader:
        row = {(k or "").strip().lower(): (v.strip() if isinstance(v, str) else v) for k, v in raw.items()}
        entry = build_entry(
            _pick(row, ID_COLUMNS), _pick(row, NAME_COLUMNS), _pick(row, COUNTRY_COLUMNS)
        )
        if entry:
            entries.append(entry)
    return entries


def parse_json_directory(document: Any) -> list[dict]:
    entries = []
    if isinstance(document, dict):
        for tg_id, name in document.items():
            entry = build_entry(tg_id, name)
            if entry:
                entries.append(entry)
    elif isinstance(document, list):
        for item in document:
            if not isinstance(item, dict):
                continue
            row = {str(k).lower(): v for k, v in item.items()}
            entry = build_entry(
                _pick(row, ID_COLUMNS), _pick(row, NAME_COLUMNS), _pick(row, COUNTRY_COLUMNS)
            )
            if entry:
                entries.append(entry)
    else:
        raise ValueError("Unexpected JSON talkgroup document")
    return entries


def parse_directory(text: str) -> list[dict]:
    """Parse a talkgroup document, detecting JSON or CSV from its first character."""
    stripped = text.lstrip("\ufeff \t\r\n")
    if stripped.startswith(("{", "[")):
        return parse_json_directory(json.loads(stripped))
    return parse_csv_directory(stripped)


async def fetch_directory_document(client: httpx.AsyncClient, url: str) -> str:
    response = await client.get(url)
    response.raise_for_status()
    return response.text


async def _download_and_parse(client: httpx.AsyncClient, urls: list[str]) -> tuple[Optional[list[dict]], Optional[str]]:
    for url in urls:
        try:
            entries = parse_directory(await fetch_directory_document(client, url))
        except (httpx.HTTPError, ValueError, csv.Error) as e:
            logger.warning(f"Talkgroup download from {url} failed: {e}")
            continue
        if not entries:
            logger.warning(f"Talkgroup document from {url} contained no talkgroups")
            continue
        logger.info(f"Parsed {len(entries)} talkgroups from {url}")
        return entries, url
    return None, None


async def refresh_directory(
    session_factory: async_sessionmaker,
    client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
) -> dict:
    """
    Refresh the talkgroup directory.

    Returns {"success": True, "count": n, "source": url} or
    {"success": False, "error": message}. Existing rows are untouched on failure.
    """
    settings = settings or get_settings()
    urls = [u for u in (settings.talkgroup_source_url, settings.talkgroup_fallback_url) if u]

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.talkgroup_fetch_timeout, follow_redirects=True)

    try:
        with sentry_sdk.start_span(op="http.client", name="Download talkgroup directory"):
            entries, source = await _download_and_parse(client, urls)
        if entries is None:
            logger.error("Talkgroup directory refresh skipped: no source could be loaded")
            return {"success": False, "error": "no talkgroup source available"}

        with sentry_sdk.start_span(op="db.load", name="Upsert talkgroup directory"):
            async with session_factory() as db:
                count = await TalkgroupRepository(db).upsert_many(entries)

        logger.info(f"Talkgroup directory refreshed: {count} talkgroups from {source}")
        return {"success": True, "count": count, "source": source}

    except Exception as e:
        logger.error(f"Talkgroup directory refresh failed: {e}")
        sentry_sdk.capture_exception(e)
        return {"success": False, "error": str(e)}

    finally:
        if owns_client:
            await client.aclose()
