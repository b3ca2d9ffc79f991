from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # weak=False keeps bound methods of systems that are not stored anywhere alive.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# HOST CALLBACKS
# ============================================================================
EVENT_RENDER_TICK = "render_tick"      # payload: none
EVENT_LOGIC_TICK = "logic_tick"        # payload: none
EVENT_TIMER_TICK = "timer_tick"        # payload: none


# ============================================================================
# INPUT & INTERACTION
# ============================================================================
EVENT_MOUSE_PRESS = "mouse_press"                  # payload: x, y, button
EVENT_TILE_CLICK = "tile_click"                    # payload: x, y (grid coordinates)
EVENT_NEW_GAME_REQUEST = "new_game_request"        # payload: timed=bool


# ============================================================================
# BOARD MECHANICS
# ============================================================================
EVENT_TILE_SELECTED = "tile_selected"              # payload: x, y
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: x, y, reason=str
EVENT_SELECTION_REJECTED = "selection_rejected"    # payload: x, y, reason=str
EVENT_SWAP_VALID = "swap_valid"                    # payload: src=(x,y), dst=(x,y)
EVENT_SWAP_INVALID = "swap_invalid"                # payload: src=(x,y), dst=(x,y)
EVENT_CASCADE_STEP = "cascade_step"                # payload: pending=int, recheck=bool


# ============================================================================
# SESSION
# ============================================================================
EVENT_MOVE_RESOLVED = "move_resolved"              # payload: pieces=int
EVENT_SCORE_CHANGED = "score_changed"              # payload: score, high_score, timed_high_score
EVENT_GAME_STARTED = "game_started"                # payload: timed=bool
EVENT_GAME_OVER = "game_over"                      # payload: message=str, reason=str
