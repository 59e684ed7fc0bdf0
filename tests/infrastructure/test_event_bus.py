"""Tests for the in-memory event bus and audit subscriber."""

import logging

import pytest

from alertbridge.domain.events.alert_events import (
    AlertEvaluatedEvent,
    AlertProcessedEvent,
    AlertReceivedEvent,
)
from alertbridge.domain.ports.event_bus_port import EventBusPort
from alertbridge.infrastructure.event_bus import EventBus, subscribe_audit_log


class TestEventBus:
    def test_satisfies_port(self):
        assert isinstance(EventBus(), EventBusPort)

    @pytest.mark.asyncio
    async def test_dispatch_by_type(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(AlertProcessedEvent, handler)
        await bus.publish([
            AlertReceivedEvent(aggregate_id="ALR-1"),
            AlertProcessedEvent(aggregate_id="ALR-1", incident_id="INC-1"),
        ])

        assert len(received) == 1
        assert received[0].incident_id == "INC-1"

    @pytest.mark.asyncio
    async def test_multiple_handlers(self):
        bus = EventBus()
        calls = []

        async def first(event):
            calls.append("first")

        async def second(event):
            calls.append("second")

        bus.subscribe(AlertReceivedEvent, first)
        bus.subscribe(AlertReceivedEvent, second)
        await bus.publish([AlertReceivedEvent(aggregate_id="ALR-1")])

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_handler_errors_propagate(self):
        bus = EventBus()

        async def broken(event):
            raise RuntimeError("handler failed")

        bus.subscribe(AlertReceivedEvent, broken)
        with pytest.raises(RuntimeError):
            await bus.publish([AlertReceivedEvent(aggregate_id="ALR-1")])


class TestAuditLog:
    @pytest.mark.asyncio
    async def test_lifecycle_events_logged(self, caplog):
        bus = EventBus()
        subscribe_audit_log(bus)

        with caplog.at_level(logging.INFO, logger="alertbridge.infrastructure.event_bus"):
            await bus.publish([
                AlertReceivedEvent(aggregate_id="ALR-1", unit_ref="1307", severity="High"),
                AlertEvaluatedEvent(aggregate_id="ALR-1", should_escalate=True),
                AlertProcessedEvent(aggregate_id="ALR-1", incident_id="INC-1"),
            ])

        audit = [r for r in caplog.records if r.getMessage().startswith("audit")]
        assert len(audit) == 3
        assert all(r.alert_id == "ALR-1" for r in audit)
