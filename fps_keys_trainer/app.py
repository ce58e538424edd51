from __future__ import annotations

import logging
import random
import signal
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO

from .clock import Clock, RealClock, Scheduler
from .config import TrainerConfig, default_log_level, default_log_path
from .renderer import log_capacity, render_final_summary, render_frame
from .results import SessionSummary
from .rounds import Phase, RoundController
from .selection import KeySelector, SeededRng
from .stats import StatsStore
from .terminal import KeyPress, RawKeyboard, TerminalSurface

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.01
PACKAGE_LOGGER = "fps_keys_trainer"

_log_handler: logging.Handler | None = None


def configure_logging(path: Path | None = None, level: str | None = None) -> None:
    """Send package logs to a file; the terminal itself belongs to the renderer."""

    global _log_handler
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if _log_handler is not None:
        pkg_logger.removeHandler(_log_handler)
        _log_handler.close()
        _log_handler = None

    log_path = path or default_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    pkg_logger.addHandler(handler)
    numeric = logging.getLevelName(level or default_log_level())
    pkg_logger.setLevel(numeric if isinstance(numeric, int) else logging.WARNING)
    _log_handler = handler


class TrainerApp:
    """Glue between input events, the round controller and the screen."""

    def __init__(
        self,
        *,
        controller: RoundController,
        scheduler: Scheduler,
        surface: TerminalSurface,
    ) -> None:
        self._controller = controller
        self._scheduler = scheduler
        self._surface = surface
        self._summary: SessionSummary | None = None
        self._drawn: tuple[int, int, int] | None = None

    @property
    def running(self) -> bool:
        return self._summary is None

    @property
    def summary(self) -> SessionSummary | None:
        return self._summary

    def handle_input(self, press: KeyPress) -> None:
        if not self.running:
            return
        if press.is_interrupt:
            self._summary = self._controller.on_shutdown()
            return
        self._controller.on_key_press(press.char)

    def tick(self) -> None:
        self._scheduler.run_due()

    def render(self, *, force: bool = False) -> bool:
        """Redraw when the round state or the terminal size changed."""

        if not self.running:
            return False
        columns, rows = self._surface.size()
        key = (self._controller.revision, columns, rows)
        if not force and key == self._drawn:
            return False
        snapshot = self._controller.snapshot(log_tail=log_capacity(rows))
        self._surface.write(render_frame(snapshot, columns=columns, rows=rows))
        self._drawn = key
        return True


@contextmanager
def _deferred_interrupts() -> Iterator[list[int]]:
    """Record SIGINT instead of raising while the session is being set up."""

    received: list[int] = []
    if threading.current_thread() is not threading.main_thread():
        yield received
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: received.append(signum))
    try:
        yield received
    finally:
        signal.signal(signal.SIGINT, previous)


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], Iterable[KeyPress] | None] | None = None,
    config: TrainerConfig | None = None,
    clock: Clock | None = None,
    seed: int | None = None,
    input_stream: IO[str] | None = None,
    output: IO[str] | None = None,
) -> int:
    cfg = config or TrainerConfig.from_env()
    configure_logging()

    real_clock = clock or RealClock()
    surface = TerminalSurface(output)

    frame = 0
    surface.hide_cursor()
    try:
        with RawKeyboard(input_stream) as keyboard:
            # A Ctrl+C during setup still ends the session with a summary.
            with _deferred_interrupts() as interrupted:
                store = StatsStore.load(cfg.stats_path, cfg.keys)
                scheduler = Scheduler(real_clock)
                controller = RoundController(
                    store=store,
                    selector=KeySelector(SeededRng(_new_seed() if seed is None else seed)),
                    clock=real_clock,
                    scheduler=scheduler,
                    rolling_window=cfg.rolling_window,
                    round_delay_s=cfg.round_delay_s,
                )
                app = TrainerApp(controller=controller, scheduler=scheduler, surface=surface)
                logger.info(
                    "session started (stats: %s, games played: %d)", cfg.stats_path, store.games_played
                )
                app.render(force=True)
                controller.start_round()
            if interrupted:
                app.handle_input(KeyPress.interrupt())

            while app.running:
                try:
                    if event_injector is not None:
                        for press in event_injector(frame) or ():
                            app.handle_input(press)
                    if keyboard.enabled:
                        press = keyboard.poll(POLL_INTERVAL_S)
                        if press is not None:
                            app.handle_input(press)
                    else:
                        time.sleep(POLL_INTERVAL_S)
                    app.tick()
                    app.render()
                except KeyboardInterrupt:
                    # cbreak mode keeps ISIG, so Ctrl+C arrives as SIGINT.
                    app.handle_input(KeyPress.interrupt())

                frame += 1
                if max_frames is not None and frame >= max_frames:
                    break
    finally:
        surface.restore()

    summary = app.summary
    if summary is not None:
        assert controller.phase is Phase.FINISHED
        surface.clear()
        surface.print_lines(render_final_summary(summary))
    return 0
