"""Exception types raised while proxying and relabeling metrics."""


class LabelExporterError(Exception):
    """Base class for all proxy errors."""


class BackendUnavailable(LabelExporterError):
    """The backend could not be reached or did not answer with 200."""

    def __init__(self, message: str, kind: str = "http-get"):
        super().__init__(message)
        self.kind = kind


class OverrideSourceUnreadable(LabelExporterError):
    """An override directory or file could not be read."""

    def __init__(self, message: str, kind: str):
        super().__init__(message)
        self.kind = kind


class LabelParseError(LabelExporterError):
    """A label block could not be decoded."""


class RoutingMismatch(LabelExporterError):
    """The request path does not encode a backend port."""
