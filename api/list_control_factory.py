"""Build a ListControl from its saved parameters."""

from __future__ import annotations

import logging

from control import ControlServices
from control_models import ControlParams
from filter_manager import PhraseFilterManager
from list_control import ListControl
from options_loader import load_options, lookup_field

log = logging.getLogger(__name__)


async def list_control_factory(
    control_params: ControlParams,
    services: ControlServices,
    use_time_filter: bool = False,
) -> ListControl:
    """Resolve the index pattern, load the first option set and build the control.

    Raises IndexPatternNotFoundError and SearchExecutionError. A control with
    no options is still returned, disabled.
    """
    index_pattern = await services.index_patterns.get(control_params.index_pattern)

    # Dynamic options only work on string fields. The setting defaults to on,
    # so turn it off for any other field type.
    lookup = lookup_field(index_pattern, control_params.field_name)
    if lookup.ok and lookup.field.type != "string":
        control_params.options.dynamic_options = False

    filter_manager = PhraseFilterManager(
        control_params.id,
        control_params.field_name,
        index_pattern,
        services.filter_store,
    )

    state = await load_options(
        filter_manager, control_params, services, use_time_filter=use_time_filter
    )

    list_control = ListControl(
        control_params,
        filter_manager,
        services,
        use_time_filter=use_time_filter,
        select_options=state.options,
    )
    list_control.apply_state(state)

    log.info(
        "Created list control %s on %s/%s (%d options, enabled=%s)",
        control_params.id, index_pattern.title, control_params.field_name,
        len(state.options), list_control.enabled,
    )
    return list_control
