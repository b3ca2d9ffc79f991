from typing import Tuple

from esper import World

from gemfall.components.board import Board
from gemfall.components.game_session import GameSession
from gemfall.components.tick_schedule import TickSchedule


def get_session_entity(world: World) -> int:
    for entity, _ in world.get_component(GameSession):
        return entity
    raise RuntimeError("GameSession entity not found")


def get_session(world: World) -> GameSession:
    return world.component_for_entity(get_session_entity(world), GameSession)


def get_board(world: World) -> Board:
    return world.component_for_entity(get_session_entity(world), Board)


def get_schedule(world: World) -> TickSchedule:
    return world.component_for_entity(get_session_entity(world), TickSchedule)


def get_session_state(world: World) -> Tuple[GameSession, Board, TickSchedule]:
    entity = get_session_entity(world)
    return (
        world.component_for_entity(entity, GameSession),
        world.component_for_entity(entity, Board),
        world.component_for_entity(entity, TickSchedule),
    )
