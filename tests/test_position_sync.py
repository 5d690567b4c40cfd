from conftest import SCREEN
from position_sync import PointerPoller, PositionSync
from test_interaction import FakeHost


def test_push_only_when_rounded_position_changes(make_engine) -> None:
    engine = make_engine()
    host = FakeHost()
    sync = PositionSync(engine, host)
    assert sync.push()
    assert host.moves == [(500, 500)]
    engine.state.x = 500.3
    assert not sync.push()
    engine.state.x = 501.0
    assert sync.push()
    assert host.moves[-1] == (501, 500)


def test_pull_position_adopts_and_clamps_window_position(make_engine) -> None:
    engine = make_engine()
    host = FakeHost(position=(3000, 120))
    sync = PositionSync(engine, host)
    sync.pull_position()
    assert engine.state.position == (SCREEN.width - 256.0, 120.0)


def test_pointer_sample_and_screen_size(make_engine) -> None:
    engine = make_engine(position=(1600.0, 800.0))
    sync = PositionSync(engine, FakeHost())
    sync.on_pointer_sample(12, 34)
    assert engine.state.pointer == (12.0, 34.0)
    sync.on_screen_size(800, 600)
    assert engine.state.bounds.width == 800
    assert engine.state.position == (544.0, 344.0)


def _watching_poller(source, samples):
    poller = PointerPoller(source)
    poller._watching = True
    poller._callback = lambda x, y: samples.append((x, y))
    return poller


def test_poll_forwards_samples() -> None:
    samples = []
    poller = _watching_poller(lambda: (10.0, 20.0), samples)
    assert poller._poll()
    assert samples == [(10.0, 20.0)]


def test_poll_skips_missing_pointer() -> None:
    samples = []
    poller = _watching_poller(lambda: None, samples)
    assert poller._poll()
    assert samples == []


def test_poll_survives_failing_source() -> None:
    def broken():
        raise RuntimeError("no seat")

    samples = []
    poller = _watching_poller(broken, samples)
    assert poller._poll()
    assert samples == []


def test_poll_stops_when_not_watching() -> None:
    poller = PointerPoller(lambda: (1.0, 1.0))
    assert not poller.watching
    assert not poller._poll()
