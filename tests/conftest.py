import asyncio
from collections import defaultdict

import pytest

from genre_player.application.interfaces.audio_output import AudioOutput
from genre_player.application.interfaces.track_provider import TrackProvider
from genre_player.domain.music.catalog import build_default_catalog
from genre_player.domain.music.entities import TrackCandidate, TrackMetadata
from genre_player.domain.music.value_objects import TrackId
from genre_player.domain.shared.events import EventBus, reset_event_bus
from genre_player.domain.shared.exceptions import PlaybackFaultError

# ============================================================================
# Global State
# ============================================================================


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset the event bus singleton and cached settings around every test."""
    from genre_player.config.settings import clear_settings_cache

    reset_event_bus()
    clear_settings_cache()
    yield
    reset_event_bus()
    clear_settings_cache()


@pytest.fixture
def event_bus():
    return EventBus()


class EventRecorder:
    """Collects every published event of the subscribed types, in order."""

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self.events: list = []

    def watch(self, *event_types) -> "EventRecorder":
        for event_type in event_types:
            self._bus.subscribe(event_type, self._record)
        return self

    async def _record(self, event) -> None:
        self.events.append(event)

    def of(self, event_type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def recorder(event_bus):
    return EventRecorder(event_bus)


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def catalog():
    return build_default_catalog()


@pytest.fixture
def lofi(catalog):
    return catalog.get("lofi-beats")


@pytest.fixture
def ambient(catalog):
    return catalog.get("ambient")


@pytest.fixture
def edm(catalog):
    return catalog.get("edm")


def build_track(
    number: int,
    genre_id: str = "lofi-beats",
    *,
    duration: float | None = 120.0,
    genre_label: str = "Lo-Fi Beats",
    source: str = "fake",
) -> TrackMetadata:
    return TrackMetadata(
        id=TrackId.for_provider(source, number),
        title=f"{genre_label} #{number}",
        genre_id=genre_id,
        genre_label=genre_label,
        locator=f"https://cdn.example/{genre_id}/{number}.mp3",
        duration_seconds=duration,
        source=source,
    )


@pytest.fixture
def make_track():
    """Factory for tracks: ``make_track(1)``, ``make_track(2, "edm", duration=40)``."""
    return build_track


# ============================================================================
# Fakes
# ============================================================================


class FakeProvider(TrackProvider):
    """Scripted provider.

    Calls are numbered from 1. ``block(n)`` holds call *n* until the returned
    event is set; ``fail(n, exc)`` makes call *n* raise *exc*.
    """

    name = "fake"

    def __init__(self, duration: float | None = 120.0) -> None:
        self.duration = duration
        self.calls: list[tuple[str, dict[str, float] | None]] = []
        self.released: list[TrackMetadata] = []
        self.closed = False
        self.active = 0
        self.max_active = 0
        self._gates: dict[int, asyncio.Event] = {}
        self._failures: dict[int, Exception] = {}
        self._durations: dict[int, float | None] = {}

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def block(self, call_number: int) -> asyncio.Event:
        gate = self._gates.setdefault(call_number, asyncio.Event())
        return gate

    def fail(self, call_number: int, error: Exception) -> None:
        self._failures[call_number] = error

    def set_duration(self, call_number: int, duration: float | None) -> None:
        self._durations[call_number] = duration

    async def wait_for_calls(self, count: int) -> None:
        """Spin the loop until *count* fetches have been dispatched."""
        for _ in range(200):
            if len(self.calls) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} provider calls, saw {len(self.calls)}")

    async def search(self, query, token=None):
        return [
            TrackCandidate(native_id="1", title=query, stream_url="https://cdn.example/1.mp3")
        ]

    async def fetch_track(self, genre, token=None, params=None):
        self.calls.append((genre.id, params.as_dict() if params is not None else None))
        number = len(self.calls)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            gate = self._gates.get(number)
            if gate is not None:
                await gate.wait()
            if number in self._failures:
                raise self._failures[number]
            return build_track(
                number,
                genre.id,
                genre_label=genre.label,
                duration=self._durations.get(number, self.duration),
            )
        finally:
            self.active -= 1

    async def release(self, track):
        self.released.append(track)

    async def aclose(self):
        self.closed = True


@pytest.fixture
def provider():
    return FakeProvider()


class FakeAudioOutput(AudioOutput):
    """In-memory audio output.

    Loading makes the source ready immediately unless ``auto_ready`` is off.
    Signals from the "device" are raised with the ``emit_*`` coroutines.
    """

    def __init__(self, *, auto_ready: bool = True) -> None:
        self.auto_ready = auto_ready
        self.fail_play: str | None = None
        self.commands: list[tuple] = []
        self._loaded: TrackId | None = None
        self._position = 0.0
        self._duration: float | None = None
        self._ready = False
        self._paused = True
        self._callbacks: dict[str, object] = defaultdict(lambda: None)

    # -- AudioOutput --------------------------------------------------------

    @property
    def loaded_track_id(self):
        return self._loaded

    @property
    def position(self):
        return self._position

    @property
    def duration(self):
        return self._duration

    @property
    def is_ready(self):
        return self._ready

    @property
    def is_paused(self):
        return self._paused

    async def load(self, track_id, locator):
        self.commands.append(("load", str(track_id)))
        self._loaded = track_id
        self._position = 0.0
        self._duration = None
        self._paused = True
        self._ready = self.auto_ready

    async def seek(self, position):
        self.commands.append(("seek", position))
        self._position = position

    async def play(self):
        self.commands.append(("play",))
        if self.fail_play is not None:
            raise PlaybackFaultError(self.fail_play)
        self._paused = False

    async def pause(self):
        self.commands.append(("pause",))
        self._paused = True

    async def unload(self):
        self.commands.append(("unload",))
        self._loaded = None
        self._ready = False
        self._paused = True
        self._duration = None

    def set_on_ready_callback(self, callback):
        self._callbacks["ready"] = callback

    def set_on_position_changed_callback(self, callback):
        self._callbacks["position"] = callback

    def set_on_duration_known_callback(self, callback):
        self._callbacks["duration"] = callback

    def set_on_ended_callback(self, callback):
        self._callbacks["ended"] = callback

    def set_on_error_callback(self, callback):
        self._callbacks["error"] = callback

    # -- Device signals -----------------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self._loaded is not None and self._ready and not self._paused

    def loaded(self) -> str | None:
        return str(self._loaded) if self._loaded is not None else None

    def command_names(self) -> list[str]:
        return [command[0] for command in self.commands]

    async def emit_ready(self):
        self._ready = True
        await self._callbacks["ready"]()

    async def emit_position(self, position: float):
        self._position = position
        await self._callbacks["position"](position)

    async def emit_duration(self, duration: float):
        self._duration = duration
        await self._callbacks["duration"](duration)

    async def emit_ended(self):
        self._paused = True
        await self._callbacks["ended"]()

    async def emit_error(self, message: str):
        await self._callbacks["error"](message)


@pytest.fixture
def audio_output():
    return FakeAudioOutput()


async def drain(rounds: int = 5) -> None:
    """Let pending tasks run a few loop iterations."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settle():
    return drain
