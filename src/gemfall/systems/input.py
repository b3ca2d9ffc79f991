from gemfall.events.bus import (
    EventBus,
    EVENT_MOUSE_PRESS,
    EVENT_NEW_GAME_REQUEST,
    EVENT_TILE_CLICK,
)
from gemfall.ui.layout import BUTTON_NEW_TIMED_GAME, BoardLayout

LEFT_BUTTON = 1


class InputSystem:
    """Turns raw window presses into grid clicks or new-game requests."""

    def __init__(self, event_bus: EventBus, layout: BoardLayout):
        self.event_bus = event_bus
        self.layout = layout
        self.event_bus.subscribe(EVENT_MOUSE_PRESS, self.on_mouse_press)

    def on_mouse_press(self, sender, **kwargs):
        x = kwargs.get('x')
        y = kwargs.get('y')
        button = kwargs.get('button', LEFT_BUTTON)
        if x is None or y is None or button != LEFT_BUTTON:
            return
        cell = self.layout.cell_at(x, y)
        if cell is not None:
            self.event_bus.emit(EVENT_TILE_CLICK, x=cell[0], y=cell[1])
            return
        choice = self.layout.button_at(x, y)
        if choice is not None:
            self.event_bus.emit(EVENT_NEW_GAME_REQUEST, timed=choice == BUTTON_NEW_TIMED_GAME)
