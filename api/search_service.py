"""Elasticsearch search execution for option queries."""

from __future__ import annotations

import logging
from typing import Optional

from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from pydantic import BaseModel, Field

from config import ES_URL
from control_models import Filter
from errors import SearchExecutionError

log = logging.getLogger(__name__)

es = AsyncElasticsearch(ES_URL)


class SearchRequest(BaseModel):
    index: str
    size: int = 0
    timeout: Optional[str] = None
    terminate_after: Optional[int] = None
    filters: list[Filter] = Field(default_factory=list)
    extra_clauses: list[dict] = Field(
        default_factory=list,
        description="Raw query clauses ANDed with the filters (e.g. a time range)",
    )
    aggs: dict = Field(default_factory=dict)


def build_query(filters: list[Filter], extra_clauses: list[dict] | None = None) -> dict:
    """Translate active filters into a ``bool`` query."""
    must = list(extra_clauses or [])
    must_not = []
    for f in filters:
        if f.meta.disabled:
            continue
        if f.meta.negate:
            must_not.append(f.query)
        else:
            must.append(f.query)

    if not must and not must_not:
        return {"match_all": {}}
    query: dict = {}
    if must:
        query["filter"] = must
    if must_not:
        query["must_not"] = must_not
    return {"bool": query}


class ElasticSearchService:

    def __init__(self, client: AsyncElasticsearch | None = None):
        self.client = client or es

    async def search(self, request: SearchRequest) -> dict:
        query = build_query(request.filters, request.extra_clauses)
        params = {
            "index": request.index,
            "size": request.size,
            "query": query,
            "aggs": request.aggs,
        }
        if request.timeout:
            params["timeout"] = request.timeout
        if request.terminate_after:
            params["terminate_after"] = request.terminate_after

        log.debug("Searching %s: %s", request.index, params)
        try:
            resp = await self.client.search(**params)
        except (ApiError, TransportError) as e:
            raise SearchExecutionError(f"Search on {request.index} failed: {e}") from e
        return resp.body if hasattr(resp, "body") else resp
