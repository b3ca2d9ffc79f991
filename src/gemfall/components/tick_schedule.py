from dataclasses import dataclass


@dataclass(slots=True)
class TickSchedule:
    """Which host callbacks are armed. The host reads this; the engine holds no timers."""
    render: bool = False
    logic: bool = False
    timer: bool = False

    def arm(self, *, timed: bool) -> None:
        self.render = True
        self.logic = True
        self.timer = timed

    def disarm(self) -> None:
        self.render = False
        self.logic = False
        self.timer = False
