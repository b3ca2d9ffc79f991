"""Entry point for the Gemfall match-three game.

Sets up the ECS world, event bus, systems, and Arcade window. The window is the
only scheduler: it turns frame time into render, logic and timer ticks.
"""
import logging

from arcade import Window, run, set_background_color, color

from gemfall.config import GameConfig
from gemfall.events.bus import (
    EventBus,
    EVENT_GAME_STARTED,
    EVENT_LOGIC_TICK,
    EVENT_MOUSE_PRESS,
    EVENT_RENDER_TICK,
    EVENT_TIMER_TICK,
)
from gemfall.persistence.high_scores import HighScoreStore
from gemfall.systems.input import InputSystem
from gemfall.systems.render import RenderSystem
from gemfall.systems.session import GameSessionSystem
from gemfall.systems.session_utils import get_schedule
from gemfall.ui.layout import BoardLayout
from gemfall.utils.tick_clock import TickClock
from gemfall.world import create_world

TICK_EVENTS = (
    ("render", EVENT_RENDER_TICK),
    ("logic", EVENT_LOGIC_TICK),
    ("timer", EVENT_TIMER_TICK),
)


class GemfallWindow(Window):
    def __init__(self, config: GameConfig | None = None):
        self.config = config or GameConfig()
        self.layout = BoardLayout(cols=self.config.width, rows=self.config.height)
        super().__init__(self.layout.window_width, self.layout.window_height, "Gemfall", resizable=False)
        self.event_bus = EventBus()
        self.world = create_world(self.event_bus, self.config)
        self.clock = TickClock({
            "render": self.config.animate_speed,
            "logic": self.config.update_speed,
            "timer": self.config.timer_speed,
        })
        self.event_bus.subscribe(EVENT_GAME_STARTED, self.on_game_started)

        self.render_system = RenderSystem(self.world, self.event_bus, self.layout)
        self.input_system = InputSystem(self.event_bus, self.layout)
        self.session_system = GameSessionSystem(
            self.world,
            self.event_bus,
            HighScoreStore(self.config.high_scores_path),
        )
        set_background_color(color.WHITE)

    def on_game_started(self, sender, **kwargs):
        # A fresh game gets a full first second on its timer.
        self.clock.reset()

    def on_draw(self):
        self.clear()
        self.render_system.process()

    def on_update(self, delta_time: float):
        due = self.clock.advance(delta_time)
        for name, event in TICK_EVENTS:
            for _ in range(due[name]):
                if not getattr(get_schedule(self.world), name):
                    break
                self.event_bus.emit(event)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        self.event_bus.emit(EVENT_MOUSE_PRESS, x=x, y=y, button=button)


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    GemfallWindow()
    run()

if __name__ == "__main__":
    main()
