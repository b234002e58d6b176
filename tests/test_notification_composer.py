import pytest

from tm_notify.models.game import parse_game_state
from tm_notify.services.errors import ConsistencyError
from tm_notify.services.notification_composer import (
    compose,
    is_full_turn,
    looks_finished_legacy,
    notify_lingering,
)


def _state(doc):
    return parse_game_state(doc)


def test_finished_game_is_gameover():
    state = _state({"finished": 1, "active_faction": "cultists", "action_required": [{"type": "gameover"}]})
    assert compose(state) == "gameover"


def test_finished_dominates_full_turn_without_faction():
    state = _state({"finished": 1, "action_required": [{"type": "full", "faction": "witches"}]})
    assert compose(state) == "gameover"


def test_unfinished_flag_does_not_end_game():
    state = _state({"finished": 0, "action_required": [{"type": "dwelling", "faction": "mermaids"}]})
    assert compose(state) == "mermaids should place a dwelling"


def test_absent_actions_yield_nothing():
    assert compose(_state({"active_faction": "witches"})) is None


def test_empty_actions_yield_nothing():
    assert compose(_state({"active_faction": "witches", "action_required": []})) is None


def test_full_turn_suppresses_lingering_actions():
    state = _state(
        {
            "active_faction": "witches",
            "action_required": [
                {"faction": "witches", "type": "leech"},
                {"type": "full", "faction": "witches"},
            ],
        }
    )
    assert compose(state) == "witches should take their turn"


def test_full_turn_without_active_faction_is_inconsistent():
    state = _state({"action_required": [{"type": "full", "faction": "witches"}]})
    with pytest.raises(ConsistencyError) as excinfo:
        compose(state, game_id="g1")
    assert excinfo.value.game_id == "g1"


@pytest.mark.parametrize(
    "action,expected",
    [
        ({"faction": "mermaids", "type": "dwelling"}, "mermaids should place a dwelling"),
        ({"faction": "giants", "type": "cult"}, "giants may advance on a cult track"),
        ({"faction": "nomads", "type": "bonus"}, "nomads should pick a bonus tile"),
        ({"faction": "nomads", "type": "leech", "from_faction": "witches"}, "nomads may leech"),
        ({"faction": "halflings", "type": "transform"}, "halflings may transform"),
        ({"player": "Johanvr", "type": "faction"}, "Johanvr should pick a faction"),
        ({"player": "Johanvr", "type": "dwelling"}, "Johanvr may dwelling"),
    ],
)
def test_lingering_phrasing(action, expected):
    assert compose(_state({"action_required": [action]})) == expected


def test_lingering_lines_are_joined_in_order():
    state = _state(
        {
            "action_required": [
                {"faction": "giants", "type": "cult"},
                {"type": "leech"},
                {"faction": "nomads", "type": "leech"},
            ]
        }
    )
    assert compose(state) == "giants may advance on a cult track\nnomads may leech"


@pytest.mark.parametrize(
    "actions",
    [
        [{"type": "gameover"}],
        [{"faction": "witches"}],
        [{"player": "Johanvr"}],
        [{}],
    ],
)
def test_requirements_without_scope_or_kind_yield_nothing(actions):
    assert compose(_state({"action_required": actions})) is None


def test_faction_and_player_scopes_are_independent():
    state = _state({"action_required": [{"faction": "witches", "player": "Johanvr", "type": "faction"}]})
    assert compose(state) == "witches may faction\nJohanvr should pick a faction"


def test_is_full_turn():
    assert is_full_turn(_state({"action_required": [{"type": "cult"}, {"type": "full"}]}).required_actions)
    assert not is_full_turn(_state({"action_required": [{"type": "cult"}]}).required_actions)
    assert not is_full_turn([])


def test_notify_lingering_empty():
    assert notify_lingering([]) is None


def test_legacy_gameover_heuristic_never_notifies():
    # ancien comportement : pas d'action_required = partie probablement terminée
    state = _state({"active_faction": "witches"})
    assert looks_finished_legacy(state) is True
    assert compose(state) is None


def test_legacy_heuristic_defers_to_explicit_flag():
    assert looks_finished_legacy(_state({"finished": 0})) is False
    assert looks_finished_legacy(_state({"finished": 1})) is False
    assert looks_finished_legacy(_state({"action_required": []})) is False
