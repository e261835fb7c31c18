"""Generic input control lifecycle shared by every control type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from control_models import ControlParams, Filter, TimeRange
from filter_manager import PhraseFilterManager, as_values
from filter_store import FilterStore

if TYPE_CHECKING:
    from index_patterns import KibanaIndexPatterns
    from search_service import ElasticSearchService


def no_values_disable_msg(field_name: str, index_pattern_title: str) -> str:
    return (
        f'Filtering occurs on the "{field_name}" field. '
        f"No values found in index pattern {index_pattern_title}."
    )


@dataclass
class ControlServices:
    """Collaborators a control talks to while loading options."""

    index_patterns: KibanaIndexPatterns
    search: ElasticSearchService
    filter_store: FilterStore
    time_range: Optional[TimeRange] = None


class Control:

    def __init__(
        self,
        control_params: ControlParams,
        filter_manager: PhraseFilterManager,
        services: ControlServices,
        use_time_filter: bool = False,
    ):
        self.id = control_params.id
        self.control_params = control_params
        self.type = control_params.type
        self.label = control_params.label or control_params.field_name
        self.filter_manager = filter_manager
        self.services = services
        self.use_time_filter = use_time_filter

        self.enabled = False
        self.disabled_reason = ""

        self.value: Any = filter_manager.get_value_from_filter_bar()

    def is_enabled(self) -> bool:
        return self.enabled

    def disable(self, reason: str) -> None:
        if not reason:
            raise ValueError("a disabled control needs a reason")
        self.enabled = False
        self.disabled_reason = reason

    def set(self, value: Any) -> None:
        """Store the selection in the same list shape the filter bar returns."""
        self.value = None if value is None else as_values(value)

    def clear(self) -> None:
        self.value = None

    def reset(self) -> None:
        """Drop unapplied edits and return to the value in the filter store."""
        self.value = self.filter_manager.get_value_from_filter_bar()

    def has_changed(self) -> bool:
        return self.value != self.filter_manager.get_value_from_filter_bar()

    def has_value(self) -> bool:
        return self.value is not None

    def has_filter(self) -> bool:
        return bool(self.filter_manager.find_filters())

    def get_filter(self) -> Filter:
        return self.filter_manager.build_filter(self.value)

    def filter_field_name(self) -> str:
        return self.filter_manager.field_name

    def format(self, value: Any) -> str:
        return str(value)
