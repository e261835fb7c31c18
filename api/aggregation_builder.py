"""Terms aggregation bodies for list control option discovery."""

from __future__ import annotations

from typing import Optional

from control_models import NamedField, ScriptedField, SortDirection

TERMS_AGG_NAME = "termsAgg"


def build_terms_agg(
    field: NamedField | ScriptedField,
    size: Optional[int] = None,
    direction: SortDirection | str = SortDirection.desc,
    include: Optional[str] = None,
) -> dict:
    """Build a ``terms`` aggregation ordered by document count.

    A falsy ``size`` leaves the cap to Elasticsearch (10 buckets); anything
    below 1 is clamped to 1.
    """
    terms: dict = {
        "order": {"_count": SortDirection(direction).value},
    }

    if size:
        terms["size"] = 1 if size < 1 else size

    if field.scripted:
        terms["script"] = {
            "source": field.script,
            "lang": field.lang,
        }
        terms["value_type"] = field.value_type
    else:
        terms["field"] = field.name

    if include:
        terms["include"] = include

    return {"terms": terms}
