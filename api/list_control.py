"""List control: pick one or more of the most frequent values of a field."""

from __future__ import annotations

import itertools
import logging
from typing import Optional, Sequence

from control import Control, ControlServices
from control_models import ControlParams, ControlState, Scalar
from filter_manager import PhraseFilterManager
from options_loader import load_options

log = logging.getLogger(__name__)


class ListControl(Control):

    def __init__(
        self,
        control_params: ControlParams,
        filter_manager: PhraseFilterManager,
        services: ControlServices,
        use_time_filter: bool = False,
        select_options: Sequence[Scalar] = (),
    ):
        super().__init__(control_params, filter_manager, services, use_time_filter)
        self.options: tuple[Scalar, ...] = tuple(select_options)
        self._tokens = itertools.count(1)
        self._latest_token = 0

    async def fetch_state(self, query: Optional[str] = None) -> tuple[int, ControlState]:
        """Reload options without touching the control.

        Returns the request token with the new state; hand both to apply_state.
        """
        token = next(self._tokens)
        self._latest_token = token
        state = await load_options(
            self.filter_manager,
            self.control_params,
            self.services,
            use_time_filter=self.use_time_filter,
            query=query,
            exclude_own_filter=True,
        )
        return token, state

    def apply_state(self, state: ControlState, token: Optional[int] = None) -> bool:
        """Apply a loaded state unless a newer fetch was issued after ``token``."""
        if token is not None and token != self._latest_token:
            log.debug(
                "Control %s: discarding stale fetch %d (latest %d)",
                self.id, token, self._latest_token,
            )
            return False

        self.options = state.options
        if state.enabled:
            self.enabled = True
            self.disabled_reason = ""
        else:
            self.disable(state.disabled_reason)
        return True

    async def fetch(self, query: Optional[str] = None) -> Optional[ControlState]:
        token, state = await self.fetch_state(query)
        if not self.apply_state(state, token):
            return None
        return state

    def get_multi_select_delimiter(self) -> str:
        return self.filter_manager.delimiter

    def has_value(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, (str, list, tuple)):
            return len(self.value) > 0
        return True
