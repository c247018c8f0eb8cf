"""Exception types raised by GPU Sizer."""


class SizerError(Exception):
    """Base class for GPU Sizer errors."""


class InvalidRequirementError(SizerError, ValueError):
    """Workload requirement cannot be ranked (no capacity asked for, or negative)."""


class CatalogLookupError(SizerError):
    """The catalog service could not return a record.

    Carries no structured payload beyond the kind and identifier that failed
    and, for HTTP errors, the status code.
    """

    def __init__(self, message: str, kind: str = None, record_id: str = None,
                 status_code: int = None):
        super().__init__(message)
        self.kind = kind
        self.record_id = record_id
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404
