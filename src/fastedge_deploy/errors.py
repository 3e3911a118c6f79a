"""Error taxonomy for deployment runs.

Everything below the orchestrators either recovers locally (input parsing)
or raises one of these; the run wrappers turn any of them into a single
failure message.
"""


class DeployError(Exception):
    """Base class for deployment errors."""

    pass


class ConfigurationError(DeployError):
    """Raised when mandatory inputs are missing."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Mandatory inputs are missing: {', '.join(missing)}")


class NotFoundError(DeployError):
    """Raised when a name lookup yields no match."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f'{kind} with name "{name}" not found')


class FastEdgeAPIError(DeployError):
    """Raised for a failed FastEdge API call (HTTP status, network, decoding)."""

    def __init__(self, label: str, detail: str, status_code: int | None = None):
        self.label = label
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{label}: {detail}")


class InputValidationError(DeployError):
    """Raised by input parsers; callers fall back to an empty default."""

    pass
