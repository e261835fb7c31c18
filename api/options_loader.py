"""Load the option set of a list control from a terms aggregation.

Shared by the factory (first load) and ListControl.fetch (refresh): resolve
the field, build the aggregation, search with the active filters and turn the
buckets into a ControlState.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from aggregation_builder import TERMS_AGG_NAME, build_terms_agg
from control import ControlServices, no_values_disable_msg
from control_models import (
    ControlParams,
    ControlState,
    IndexPattern,
    NamedField,
    ScriptedField,
    SortDirection,
)
from errors import FieldLookupError
from filter_manager import PhraseFilterManager
from query_escaper import escape
from search_service import SearchRequest

log = logging.getLogger(__name__)

# Query cost bounds for every options search
SEARCH_TIMEOUT = "1s"
TERMINATE_AFTER = 100_000


@dataclass(frozen=True)
class FieldLookup:
    field: NamedField | ScriptedField | None
    degraded_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.field is not None


def lookup_field(index_pattern: IndexPattern, field_name: str) -> FieldLookup:
    try:
        return FieldLookup(field=index_pattern.get_field(field_name))
    except FieldLookupError as e:
        return FieldLookup(field=None, degraded_reason=str(e))


def time_range_clause(index_pattern: IndexPattern, services: ControlServices) -> Optional[dict]:
    if not index_pattern.time_field_name or services.time_range is None:
        return None
    return {
        "range": {
            index_pattern.time_field_name: {
                "gte": services.time_range.from_,
                "lte": services.time_range.to,
                "format": "strict_date_optional_time",
            }
        }
    }


async def load_options(
    filter_manager: PhraseFilterManager,
    control_params: ControlParams,
    services: ControlServices,
    use_time_filter: bool = False,
    query: Optional[str] = None,
    exclude_own_filter: bool = False,
) -> ControlState:
    """Load options for the control behind ``filter_manager``.

    With ``exclude_own_filter`` the control's own selection does not narrow
    its options, so a refresh can still offer values other than the selected one.
    """
    index_pattern = filter_manager.index_pattern
    field_name = filter_manager.field_name

    lookup = lookup_field(index_pattern, field_name)
    if not lookup.ok:
        log.warning("Field lookup degraded: %s", lookup.degraded_reason)
        return ControlState(enabled=False, disabled_reason=lookup.degraded_reason)

    include = None
    if query and control_params.options.dynamic_options:
        include = f"{escape(query)}.*"

    aggs = build_terms_agg(
        lookup.field,
        size=control_params.options.size,
        direction=SortDirection.desc,
        include=include,
    )

    extra_clauses = []
    if use_time_filter:
        clause = time_range_clause(index_pattern, services)
        if clause:
            extra_clauses.append(clause)

    filters = services.filter_store.get_filters()
    if exclude_own_filter:
        filters = [f for f in filters if f.meta.controlled_by != filter_manager.control_id]

    request = SearchRequest(
        index=index_pattern.title,
        size=0,
        timeout=SEARCH_TIMEOUT,
        terminate_after=TERMINATE_AFTER,
        filters=filters,
        extra_clauses=extra_clauses,
        aggs={TERMS_AGG_NAME: aggs},
    )
    resp = await services.search.search(request)

    buckets = ((resp.get("aggregations") or {}).get(TERMS_AGG_NAME) or {}).get("buckets") or []
    options = tuple(bucket["key"] for bucket in buckets)

    if not options:
        return ControlState(
            enabled=False,
            disabled_reason=no_values_disable_msg(field_name, index_pattern.title),
        )
    return ControlState(options=options, enabled=True)
