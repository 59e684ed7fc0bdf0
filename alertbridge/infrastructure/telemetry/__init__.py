"""
alertbridge Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Alert lifecycle counters exported over OTLP
"""

from alertbridge.infrastructure.telemetry.otel_exporter import (
    AlertTelemetry,
    OTELConfig,
)

__all__ = [
    "AlertTelemetry",
    "OTELConfig",
]
