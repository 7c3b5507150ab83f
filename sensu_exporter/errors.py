"""Exceptions raised by the exporter."""


class SensuExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigError(SensuExporterError):
    """Invalid or unreadable exporter configuration."""


class BindError(SensuExporterError):
    """The metrics server could not acquire its listen address."""


class SensuAPIError(SensuExporterError):
    """Querying the Sensu API failed."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url


class TransportError(SensuAPIError):
    """Sensu API unreachable: connection refused, DNS failure, timeout."""


class ProtocolError(SensuAPIError):
    """Sensu API answered with a non-2xx status or an undecodable body."""
