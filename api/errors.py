"""Errors raised while building and refreshing input controls."""


class ControlError(Exception):
    """Base class for control construction/refresh failures."""


class IndexPatternNotFoundError(ControlError):
    def __init__(self, index_pattern_id: str):
        self.index_pattern_id = index_pattern_id
        super().__init__(f"Could not locate index-pattern id: {index_pattern_id}")


class FieldLookupError(ControlError):
    def __init__(self, field_name: str, index_pattern_title: str):
        self.field_name = field_name
        self.index_pattern_title = index_pattern_title
        super().__init__(
            f'Could not locate field "{field_name}" in index pattern {index_pattern_title}'
        )


class SearchExecutionError(ControlError):
    """The search service rejected or failed to run an options query."""
