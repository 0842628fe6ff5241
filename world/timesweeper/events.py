"""
Tile event application.

The transition table from (current state, event) to next state. No gating
happens here: the rules engine decides which events are legal to issue.
"""

from world.timesweeper.core import TileEvent, TileEventType, TileFlag, TileState, round_timestamp


def _open(state: TileState, event: TileEvent) -> TileState:
    # exploded is left as-is
    return state.evolve(flag=TileFlag.OPEN, opened_at=round_timestamp(event.timestamp))


def _flag(state: TileState, event: TileEvent) -> TileState:
    return state.evolve(flag=TileFlag.FLAGGED)


def _unflag(state: TileState, event: TileEvent) -> TileState:
    return state.evolve(flag=TileFlag.CLOSED)


def _explode(state: TileState, event: TileEvent) -> TileState:
    return state.evolve(flag=TileFlag.OPEN, exploded=True, opened_at=round_timestamp(event.timestamp))


_TRANSITIONS = {
    TileEventType.OPEN: _open,
    TileEventType.FLAG: _flag,
    TileEventType.UNFLAG: _unflag,
    TileEventType.EXPLODE: _explode,
}

# Every event type needs a transition
assert set(_TRANSITIONS) == set(TileEventType)


def apply_tile_event(state: TileState, event: TileEvent) -> TileState:
    """
    Compute the state a tile ends up in after an event.

    Transition table:
        open    -> flag=open, opened_at=timestamp (to the microsecond)
        flag    -> flag=flagged
        unflag  -> flag=closed
        explode -> flag=open, exploded=True, opened_at=timestamp

    Args:
        state: Current tile state
        event: Event to apply

    Returns:
        The next tile state (state itself is not modified)
    """
    return _TRANSITIONS[event.event_type](state, event)
