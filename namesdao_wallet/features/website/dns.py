"""The ``namesdao`` DNS-like record model stored in DID metadata.

Shape::

    {"<name>.xch": {"dns": {"default": [
        {"type": "CNAME", "host": "@", "value": "<host>", "ttl": 3600}
    ]}}}
"""

from __future__ import annotations

import json
import re
from typing import Any
from urllib.parse import urlsplit

NAMESDAO_METADATA_KEY = "namesdao"
RECORD_TYPE_CNAME = "CNAME"
RECORD_HOST_APEX = "@"
DEFAULT_TTL = 3600

_PROTOCOL = re.compile(r"^https?://", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s")

NamesdaoModel = dict[str, Any]


def parse_namesdao_string(value: Any) -> NamesdaoModel:
    """Parse the stored blob; anything malformed reads as an empty model."""
    if not value or not isinstance(value, str):
        return {}
    try:
        parsed = json.loads(value)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def serialize_namesdao(model: NamesdaoModel) -> str:
    return json.dumps(model, separators=(",", ":"))


def strip_protocol(url_or_host: str | None) -> str:
    raw = (url_or_host or "").strip()
    if not raw:
        return ""
    parts = urlsplit(raw)
    if parts.scheme and parts.netloc:
        return parts.hostname or ""
    return _PROTOCOL.sub("", raw).removesuffix("/")


def normalize_hostname(url_or_host: str | None) -> str | None:
    host = strip_protocol(url_or_host).strip()
    if not host or _WHITESPACE.search(host):
        return None
    return host


def _default_records(model: NamesdaoModel, fqdn: str) -> list[Any] | None:
    entry = model.get(fqdn)
    if not isinstance(entry, dict):
        return None
    dns = entry.get("dns")
    if not isinstance(dns, dict):
        return None
    records = dns.get("default")
    return records if isinstance(records, list) else None


def _is_apex_cname(record: Any) -> bool:
    return (
        isinstance(record, dict)
        and record.get("type") == RECORD_TYPE_CNAME
        and record.get("host") == RECORD_HOST_APEX
    )


def get_hostname_for_name(model: NamesdaoModel, fqdn: str) -> str | None:
    for record in _default_records(model, fqdn) or []:
        if _is_apex_cname(record) and record.get("value"):
            return record["value"]
    return None


def merge_name(model: NamesdaoModel, fqdn: str, host: str) -> NamesdaoModel:
    """Return a copy of ``model`` whose entry for ``fqdn`` is a single CNAME."""
    merged = dict(model)
    merged[fqdn] = {
        "dns": {
            "default": [
                {
                    "type": RECORD_TYPE_CNAME,
                    "host": RECORD_HOST_APEX,
                    "value": host,
                    "ttl": DEFAULT_TTL,
                }
            ]
        }
    }
    return merged


def verify_name_configured(model: NamesdaoModel, fqdn: str, host: str) -> bool:
    return any(
        _is_apex_cname(record)
        and record.get("value") == host
        and isinstance(record.get("ttl"), int)
        and not isinstance(record.get("ttl"), bool)
        for record in _default_records(model, fqdn) or []
    )


def resolve_existing_host(model: NamesdaoModel, name: str) -> str | None:
    """Find the published host for ``name`` under its FQDN or bare key."""
    base = name.lower().removesuffix(".xch")
    for candidate in (f"{base}.xch", base):
        host = get_hostname_for_name(model, candidate)
        if host:
            return host
    return None


def namesdao_blob_from_metadata(metadata: dict[str, Any] | None) -> Any:
    if not isinstance(metadata, dict):
        return None
    return metadata.get(NAMESDAO_METADATA_KEY)
