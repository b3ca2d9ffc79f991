from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from esper import World

from gemfall.components.piece import PIECE_COLORS
from gemfall.constants import PIECE_SCALE_FACTOR
from gemfall.events.bus import EventBus, EVENT_GAME_OVER, EVENT_GAME_STARTED, EVENT_RENDER_TICK
from gemfall.systems.session_utils import get_session_state
from gemfall.ui.layout import BUTTON_NEW_GAME, BUTTON_NEW_TIMED_GAME, BoardLayout

Color = Tuple[int, int, int]

TEXT_COLOR: Color = (0, 0, 0)
SELECTED_OUTLINE: Color = (255, 0, 0)
PIECE_OUTLINE: Color = (0, 0, 0)


@dataclass(slots=True)
class CellSprite:
    x: float
    y: float
    color: Color
    selected: bool = False


@dataclass(slots=True)
class Label:
    text: str
    x: float
    y: float
    font_size: int = 12


@dataclass(slots=True)
class RenderSnapshot:
    cells: List[CellSprite] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)
    banner: Optional[str] = None


class RenderSystem:
    """Read-only view of the board and session.

    ``on_render_tick`` refreshes a snapshot while the render callback is armed;
    ``process`` draws the latest snapshot every frame, so a finished game stays on screen.
    """

    def __init__(self, world: World, event_bus: EventBus, layout: BoardLayout):
        self.world = world
        self.event_bus = event_bus
        self.layout = layout
        self.snapshot = RenderSnapshot()
        self.event_bus.subscribe(EVENT_RENDER_TICK, self.on_render_tick)
        self.event_bus.subscribe(EVENT_GAME_STARTED, self.on_refresh)
        # The game-over frame is captured after the callbacks are disarmed.
        self.event_bus.subscribe(EVENT_GAME_OVER, self.on_refresh)

    def on_render_tick(self, sender, **kwargs):
        _, _, schedule = get_session_state(self.world)
        if schedule.render:
            self.snapshot = self.build_snapshot()

    def on_refresh(self, sender, **kwargs):
        self.snapshot = self.build_snapshot()

    def build_snapshot(self) -> RenderSnapshot:
        session, board, _ = get_session_state(self.world)
        layout = self.layout
        snapshot = RenderSnapshot(banner=session.message)
        for x in range(board.width):
            for y in range(board.height):
                piece = board.piece_at(x, y)
                if piece is None:
                    continue
                center_x, center_y = layout.cell_center(x, y)
                snapshot.cells.append(CellSprite(
                    x=center_x,
                    y=center_y,
                    color=PIECE_COLORS[piece.color],
                    selected=board.selected == (x, y),
                ))
        top = layout.window_height - layout.piece_size * 0.75
        snapshot.labels.append(Label(f"Score: {session.score}", layout.piece_size, top))
        snapshot.labels.append(Label(f"(High: {session.displayed_high_score})", layout.piece_size * 3.5, top, 10))
        if session.timed:
            snapshot.labels.append(Label(f"Time left: {max(session.time_remaining, 0)}", layout.piece_size * 6.5, top))
        for button, text in ((BUTTON_NEW_GAME, "New Game"), (BUTTON_NEW_TIMED_GAME, "New Timed Game")):
            left, bottom = layout.button_origin(button)
            snapshot.labels.append(Label(text, left, bottom))
        return snapshot

    def process(self):
        # Local import keeps tests headless without creating a window.
        import arcade
        radius = self.layout.piece_size * PIECE_SCALE_FACTOR / 2
        for cell in self.snapshot.cells:
            arcade.draw_circle_filled(cell.x, cell.y, radius, cell.color)
            if cell.selected:
                arcade.draw_circle_outline(cell.x, cell.y, radius, SELECTED_OUTLINE, 3)
            else:
                arcade.draw_circle_outline(cell.x, cell.y, radius, PIECE_OUTLINE, 1)
        for label in self.snapshot.labels:
            arcade.draw_text(label.text, label.x, label.y, TEXT_COLOR, label.font_size)
        if self.snapshot.banner:
            arcade.draw_text(
                self.snapshot.banner,
                self.layout.window_width / 2,
                self.layout.window_height / 2,
                SELECTED_OUTLINE,
                14,
                anchor_x="center",
                bold=True,
            )
