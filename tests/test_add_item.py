from types import SimpleNamespace

import pytest

from heartbeat_scheduler.runtime.disposal import (
    ConnectionDisposable,
    HandleDisposable,
    RecordDisposable,
    TEARDOWN_METHODS,
    adapt,
)
from heartbeat_scheduler.runtime.errors import InvalidArgument


class Probe:
    """Object exposing a chosen subset of the teardown methods."""

    def __init__(self, *names):
        self.calls = []
        for name in names:
            setattr(self, name, self._recorder(name))

    def _recorder(self, name):
        return lambda: self.calls.append(name)


@pytest.mark.parametrize(
    "names, expected",
    [
        (TEARDOWN_METHODS, "Destroy"),
        (("destroy", "Disconnect", "disconnect"), "destroy"),
        (("Disconnect", "disconnect"), "Disconnect"),
        (("disconnect",), "disconnect"),
    ],
)
def test_teardown_priority(scheduler, names, expected):
    probe = Probe(*names)
    scheduler.add_item(probe, 1)

    scheduler.heartbeat.fire(0.5)
    assert probe.calls == []

    scheduler.heartbeat.fire(0.5)
    scheduler.heartbeat.fire(0.5)
    assert probe.calls == [expected]


def test_zero_lifetime_disconnects_on_first_tick(scheduler):
    probe = Probe("disconnect")
    handle = scheduler.add_item(probe, 0)

    scheduler.heartbeat.fire(0)

    assert probe.calls == ["disconnect"]
    assert not handle.connected


def test_default_lifetime_is_ten(scheduler):
    probe = Probe("Destroy")
    scheduler.add_item(probe)

    scheduler.heartbeat.fire(9.5)
    assert probe.calls == []

    scheduler.heartbeat.fire(0.5)
    assert probe.calls == ["Destroy"]


def test_record_is_probed_by_key(scheduler):
    calls = []
    record = {"disconnect": lambda: calls.append("disconnect"), "name": "record"}
    scheduler.add_item(record, 0)

    scheduler.heartbeat.fire(0)

    assert calls == ["disconnect"]


def test_connection_is_disconnected(scheduler):
    heartbeat = scheduler.heartbeat
    calls = []
    connection = heartbeat.connect(lambda delta: calls.append(delta))
    scheduler.add_item(connection, 0.5)

    heartbeat.fire(0.25)
    heartbeat.fire(0.25)
    heartbeat.fire(0.25)

    assert not connection.connected
    assert calls == [0.25, 0.25]


def test_object_without_capabilities_fires_silently(scheduler):
    handle = scheduler.add_item(SimpleNamespace(name="inert"), 0)

    scheduler.heartbeat.fire(0)

    assert not handle.connected
    assert scheduler.pending_count == 0


def test_capability_is_probed_at_fire_time(scheduler):
    calls = []
    target = SimpleNamespace()
    scheduler.add_item(target, 1)
    target.destroy = lambda: calls.append("destroy")

    scheduler.heartbeat.fire(1)

    assert calls == ["destroy"]


def test_teardown_failure_is_swallowed(scheduler, guard):
    def broken():
        raise RuntimeError("cannot destroy")

    later = Probe("Destroy")
    scheduler.add_item(SimpleNamespace(Destroy=broken), 0)
    scheduler.add_item(later, 0)

    scheduler.heartbeat.fire(0)

    assert later.calls == ["Destroy"]
    assert not guard.has_errors


def test_cancelled_disposal_never_runs(scheduler):
    probe = Probe("Destroy")
    handle = scheduler.add_item(probe, 1)

    handle.disconnect()
    scheduler.heartbeat.fire(5)

    assert probe.calls == []


def test_released_reference_skips_teardown(scheduler):
    probe = Probe("Destroy")
    disposable = HandleDisposable(probe)
    scheduler.add_item(disposable, 0)

    disposable.release()
    scheduler.heartbeat.fire(0)

    assert probe.calls == []


def test_adapt_picks_adapter_by_shape(heartbeat):
    connection = heartbeat.connect(lambda _d: None)

    assert isinstance(adapt(connection), ConnectionDisposable)
    assert isinstance(adapt({"Destroy": lambda: None}), RecordDisposable)
    assert isinstance(adapt(SimpleNamespace()), HandleDisposable)
    assert adapt({"destroy": print}).capability() == "destroy"


@pytest.mark.parametrize(
    "reference, lifetime",
    [
        (None, 1),
        (5, 1),
        ("string", 1),
        (True, 1),
        ({}, 1),
        ({"Destroy": "not callable"}, 1),
        (Probe("Destroy"), -1),
        (Probe("Destroy"), "10"),
    ],
)
def test_add_item_validates_arguments(scheduler, reference, lifetime):
    with pytest.raises(InvalidArgument) as info:
        scheduler.add_item(reference, lifetime)
    assert "Scheduler.add_item" in str(info.value)
    assert scheduler.pending_count == 0


def test_released_adapter_is_rejected_at_scheduling(scheduler):
    disposable = HandleDisposable(Probe("Destroy"))
    disposable.release()

    with pytest.raises(InvalidArgument):
        scheduler.add_item(disposable, 1)
    with pytest.raises(InvalidArgument):
        adapt(HandleDisposable(None))
    assert scheduler.pending_count == 0
