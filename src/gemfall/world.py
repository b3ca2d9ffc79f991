import random

from esper import World

from gemfall.components.board import Board
from gemfall.components.game_session import GameSession
from gemfall.components.tick_schedule import TickSchedule
from gemfall.config import GameConfig
from gemfall.events.bus import EventBus


def create_world(
    event_bus: EventBus,
    config: GameConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> World:
    """Build a world holding the single session entity.

    The board starts empty; ``GameSessionSystem.new_game`` fills it.
    """
    config = config or GameConfig()
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", config)
    world.create_entity(
        GameSession(),
        TickSchedule(),
        Board(width=config.width, height=config.height, rng=world.random),
    )
    return world
