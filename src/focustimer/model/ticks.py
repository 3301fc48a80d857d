# -*- test-case-name: focustimer.model.test.test_engine -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from twisted.internet.interfaces import IReactorTime
from twisted.internet.task import LoopingCall
from twisted.logger import Logger
from twisted.python.failure import Failure

from .boundaries import TickSource

log = Logger()


@dataclass
class LoopingCallTicks(TickSource):
    """
    A L{TickSource} driven by a L{LoopingCall} on the given clock.

    If the reactor falls behind (for example, the computer was asleep) the
    tick function is called once for every second that was missed, so the
    countdown keeps up with wall-clock time.
    """

    clock: IReactorTime
    interval: float = 1.0
    _call: LoopingCall | None = field(default=None, init=False)

    @property
    def ticking(self) -> bool:
        return self._call is not None and self._call.running

    def startTicking(self, tick: Callable[[], None]) -> None:
        if self.ticking:
            return

        def ticks(count: int) -> None:
            for _ in range(count):
                # a tick may have completed a phase and stopped us
                if call is not self._call:
                    break
                tick()

        call = self._call = LoopingCall.withCount(ticks)
        call.clock = self.clock

        def failed(failure: Failure) -> None:
            log.failure("tick function failed; countdown halted", failure)
            if self._call is call:
                self._call = None

        call.start(self.interval, now=False).addErrback(failed)

    def stopTicking(self) -> None:
        call, self._call = self._call, None
        if call is not None and call.running:
            call.stop()
