"""Phrase filters owned by a single control.

Each control writes at most one filter, keyed by the control id. A single
selected value becomes a ``match_phrase`` clause; several values become a
``bool.should`` of phrase clauses.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from control_models import (
    Filter,
    FilterMeta,
    IndexPattern,
    NamedField,
    Scalar,
    ScriptedField,
)
from errors import FieldLookupError
from filter_store import FilterStore

log = logging.getLogger(__name__)

_PAINLESS_COMPARE = (
    "boolean compare(Supplier s, def v) {return s.get() == v;}"
    "compare(() -> { %s }, params.value);"
)


class PhraseFilterManager:

    delimiter = ","

    def __init__(
        self,
        control_id: str,
        field_name: str,
        index_pattern: IndexPattern,
        filter_store: FilterStore,
    ):
        self.control_id = control_id
        self.field_name = field_name
        self.index_pattern = index_pattern
        self.filter_store = filter_store

    # ── Building ─────────────────────────────────────────────────────

    def build_filter(self, value: Scalar | Sequence[Scalar]) -> Filter:
        """Build the filter for ``value`` without touching the store."""
        values = as_values(value)
        if not values:
            raise ValueError("cannot build a phrase filter without a value")

        if len(values) == 1:
            query = self._phrase_clause(values[0])
        else:
            query = {
                "bool": {
                    "should": [self._phrase_clause(v) for v in values],
                    "minimum_should_match": 1,
                }
            }

        return Filter(
            id=self.control_id,
            meta=FilterMeta(
                index=self.index_pattern.id,
                key=self.field_name,
                value=self.delimiter.join(str(v) for v in values),
                controlled_by=self.control_id,
            ),
            query=query,
        )

    def _phrase_clause(self, value: Scalar) -> dict:
        field = self._field()
        if field is not None and field.scripted:
            return {"script": {"script": _phrase_script(field, value)}}
        return {"match_phrase": {self.field_name: value}}

    def _field(self) -> NamedField | ScriptedField | None:
        try:
            return self.index_pattern.get_field(self.field_name)
        except FieldLookupError:
            return None

    # ── Store operations ─────────────────────────────────────────────

    def create_filter(self, value: Scalar | Sequence[Scalar]) -> Filter:
        """Write this control's filter, replacing any earlier one."""
        filter_ = self.build_filter(value)
        self.filter_store.add_filter(filter_)
        log.info(
            "Control %s filters %s on %s", self.control_id, self.field_name, filter_.meta.value
        )
        return filter_

    def remove_filter(self) -> None:
        self.filter_store.remove_filter(self.control_id)

    def find_filters(self) -> list[Filter]:
        return [
            f for f in self.filter_store.get_filters()
            if f.meta.controlled_by == self.control_id
        ]

    def get_value_from_filter_bar(self) -> Optional[list[Scalar]]:
        """Return the values selected through this control's filters, or None."""
        filters = self.find_filters()
        if not filters:
            return None
        values: list[Scalar] = []
        for f in filters:
            values.extend(self._values_from_query(f.query))
        return values

    def _values_from_query(self, query: dict) -> list[Scalar]:
        should = query.get("bool", {}).get("should")
        if should is not None:
            values: list[Scalar] = []
            for clause in should:
                values.extend(self._values_from_query(clause))
            return values

        for kind in ("match_phrase", "match"):
            if kind in query:
                phrase = query[kind].get(self.field_name)
                if isinstance(phrase, dict):
                    phrase = phrase.get("query")
                return [] if phrase is None else [phrase]

        params = query.get("script", {}).get("script", {}).get("params", {})
        if "value" in params:
            return [params["value"]]
        return []


def _phrase_script(field: ScriptedField, value: Scalar) -> dict:
    if field.lang == "painless":
        source = _PAINLESS_COMPARE % field.script
    else:
        source = f"({field.script}) == params.value"
    return {"source": source, "lang": field.lang, "params": {"value": value}}


def as_values(value: Any) -> list[Scalar]:
    """Normalise a selection to a list of values. None and "" select nothing."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]
