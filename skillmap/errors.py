class SkillMapError(Exception):
    """Base error; carries the report kind and parameter that caused it."""

    def __init__(self, message: str, report_kind: str | None = None, parameter: str | None = None):
        super().__init__(message)
        self.report_kind = report_kind
        self.parameter = parameter

    def __str__(self) -> str:
        base = super().__str__()
        context = []
        if self.report_kind:
            context.append(f"report={self.report_kind}")
        if self.parameter:
            context.append(f"parameter={self.parameter}")
        if not context:
            return base
        return f"{base} ({', '.join(context)})"


class ConnectionFailure(SkillMapError):
    """The store could not be reached. Not retried."""


class InvalidFilter(SkillMapError):
    """Unknown title category, or a negative limit/threshold."""


class NotFound(SkillMapError):
    """An existence-requiring lookup hit an id that is not in the store."""
