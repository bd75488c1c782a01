"""State store, reducer and action definitions."""

from webmarker.store.action_creators import ActionCreators
from webmarker.store.actions import ActionType, Tab, decode_action
from webmarker.store.reducer import reducer
from webmarker.store.state import State
from webmarker.store.store import Store

__all__ = ["ActionCreators", "ActionType", "State", "Store", "Tab", "decode_action", "reducer"]
