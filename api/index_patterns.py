"""Kibana index pattern (data view) metadata provider.

Resolves a data view id into its title, time field and field list via the
Kibana REST API.
Supports optional per-request connection override (URL + basic auth).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from config import KIBANA_URL
from control_models import IndexPattern, NamedField, ScriptedField
from errors import IndexPatternNotFoundError

log = logging.getLogger(__name__)

HEADERS = {"kbn-xsrf": "true"}


@dataclass
class KibanaConnection:
    """Optional override for Kibana URL + basic-auth credentials."""

    url: str
    username: str | None = None
    password: str | None = None


def _client_kwargs_and_url(conn: KibanaConnection | None) -> tuple[dict, str]:
    """Return (httpx client kwargs, base_url) for the given connection or defaults."""
    kwargs: dict = {"headers": HEADERS, "follow_redirects": True}
    if conn is None:
        return kwargs, KIBANA_URL
    if conn.username and conn.password:
        kwargs["auth"] = httpx.BasicAuth(conn.username, conn.password)
    return kwargs, conn.url


class KibanaIndexPatterns:

    def __init__(
        self,
        conn: KibanaConnection | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.conn = conn
        self.transport = transport

    async def get(self, index_pattern_id: str) -> IndexPattern:
        """Fetch a data view and parse its fields."""
        kwargs, base_url = _client_kwargs_and_url(self.conn)
        async with httpx.AsyncClient(transport=self.transport, **kwargs) as client:
            response = await client.get(
                f"{base_url}/api/data_views/data_view/{index_pattern_id}",
            )
        if response.status_code == 404:
            raise IndexPatternNotFoundError(index_pattern_id)
        response.raise_for_status()
        data_view = response.json().get("data_view", {})
        return parse_data_view(data_view, fallback_id=index_pattern_id)


def parse_data_view(data_view: dict, fallback_id: str = "") -> IndexPattern:
    """Convert a Kibana ``data_view`` object into an IndexPattern."""
    fields = []
    for name, field_def in sorted((data_view.get("fields") or {}).items()):
        field_name = field_def.get("name", name)
        field_type = field_def.get("type", "unknown")
        aggregatable = field_def.get("aggregatable", True)
        if field_def.get("scripted"):
            if not field_def.get("script") or not field_def.get("lang"):
                log.warning("Skipping scripted field %s without script source", field_name)
                continue
            fields.append(ScriptedField(
                name=field_name,
                type=field_type,
                script=field_def["script"],
                lang=field_def["lang"],
                aggregatable=aggregatable,
            ))
        else:
            fields.append(NamedField(
                name=field_name,
                type=field_type,
                aggregatable=aggregatable,
            ))

    return IndexPattern(
        id=data_view.get("id") or fallback_id,
        title=data_view.get("title", ""),
        time_field_name=data_view.get("timeFieldName"),
        fields=fields,
    )
