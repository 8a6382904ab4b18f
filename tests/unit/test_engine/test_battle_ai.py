"""
Unit tests for the bot decision policies.
"""

import random

import pytest

from engine.battle.ai import BattleAI, convert_path_to_move_action, get_ai_profile_handler
from engine.battle.pathfinding import Route
from engine.battle.state import BattleState
from engine.battle.types import (
    AttackAction,
    CastSpellAction,
    FighterBehaviour,
    GoalDirectedBehaviour,
    HumanControlled,
    MoveAction,
    Position,
    ReactiveBehaviour,
)
from engine.error_handler import BattleError
from systems.abilities import (
    BOW,
    DAGGER,
    FIREBALL,
    MAGI_HEAL,
    MAGI_INFLICT_HORRORS,
    MAGI_INFLICT_WOUNDS,
    SWORD,
)
from systems.conditions import BLEEDING, Condition

MAGI_SPELLS = [MAGI_HEAL, MAGI_INFLICT_WOUNDS, MAGI_INFLICT_HORRORS]


def straight_route(*cells):
    """Route along cells one orthogonal step apart."""
    return Route(
        total_distance=float(len(cells) - 1),
        positions=[(float(i), Position(*c)) for i, c in enumerate(cells)],
    )


class TestConvertPathToMoveAction:
    """Tests for cutting a route down to an affordable move."""

    def test_whole_route_affordable(self, make_actor):
        """Test that an affordable route keeps every step but the start."""
        actor = make_actor(1, "enemy", (0, 0), action_points=6)
        move = convert_path_to_move_action(actor, straight_route((0, 0), (1, 0), (2, 0)))
        assert move.positions == [Position(1, 0), Position(2, 0)]
        assert move.action_point_cost == 2
        assert move.total_distance == 2.0

    def test_truncated_to_action_points(self, make_actor):
        """Test that waypoints beyond AP x speed are dropped."""
        actor = make_actor(1, "enemy", (0, 0), action_points=2)
        route = straight_route((0, 0), (1, 0), (2, 0), (3, 0), (4, 0))
        move = convert_path_to_move_action(actor, route)
        assert move.positions == [Position(1, 0), Position(2, 0)]
        assert move.action_point_cost == 2

    def test_cost_rounds_up(self, make_actor):
        """Test that a diagonal step costs a whole action point more than its length."""
        actor = make_actor(1, "enemy", (0, 0), action_points=3)
        route = Route(total_distance=2 ** 0.5, positions=[(0.0, Position(0, 0)), (2 ** 0.5, Position(1, 1))])
        move = convert_path_to_move_action(actor, route)
        assert move.action_point_cost == 2

    def test_movement_speed_scales_reach(self, make_actor):
        """Test that a faster actor covers more cells for the same AP."""
        actor = make_actor(1, "enemy", (0, 0), action_points=1, movement_speed=2.0)
        route = straight_route((0, 0), (1, 0), (2, 0), (3, 0))
        move = convert_path_to_move_action(actor, route)
        assert move.positions == [Position(1, 0), Position(2, 0)]
        assert move.action_point_cost == 1

    def test_cost_ignores_float_noise(self, make_actor):
        """Test that a distance a hair above a whole number of points does not cost an extra point."""
        actor = make_actor(1, "enemy", (0, 0), action_points=5, movement_speed=0.1)
        distance = 0.1 + 0.2
        route = Route(total_distance=distance, positions=[(0.0, Position(0, 0)), (distance, Position(1, 0))])

        move = convert_path_to_move_action(actor, route)

        assert move.action_point_cost == 3

    def test_nothing_affordable(self, make_actor):
        """Test that zero action points yield no move."""
        actor = make_actor(1, "enemy", (0, 0), action_points=0)
        assert convert_path_to_move_action(actor, straight_route((0, 0), (1, 0))) is None

    def test_single_cell_route(self, make_actor):
        """Test that a route with only the start cell yields no move."""
        actor = make_actor(1, "enemy", (0, 0))
        assert convert_path_to_move_action(actor, straight_route((0, 0))) is None


class TestBattleAI:
    """Tests for dispatch through the profile registry."""

    def test_human_actor_rejected(self, make_actor, battle_ai):
        """Test that bots never decide for a human-controlled actor."""
        state = BattleState([make_actor(1, "player", (0, 0), behaviour=HumanControlled())], (4, 4))
        with pytest.raises(BattleError):
            battle_ai.choose_action(state)

    def test_human_behaviour_has_no_profile(self):
        """Test that the registry has no profile for human control."""
        with pytest.raises(BattleError):
            get_ai_profile_handler(HumanControlled())

    def test_profiles_registered(self):
        """Test that every bot behaviour has a profile."""
        assert get_ai_profile_handler(ReactiveBehaviour()).profile_name == "reactive"
        assert get_ai_profile_handler(GoalDirectedBehaviour()).profile_name == "support"
        assert get_ai_profile_handler(FighterBehaviour()).profile_name == "fighter"

    def test_decision_is_logged_to_telemetry(self, make_actor, battle_ai, quiet_telemetry):
        """Test that bot decisions land in the telemetry log."""
        state = BattleState(
            [make_actor(1, "enemy", (0, 0), weapon=DAGGER), make_actor(2, "player", (1, 0))],
            (4, 4),
        )
        battle_ai.choose_action(state)
        row = quiet_telemetry.recent[-1]
        assert row["event"] == "decision"
        assert row["source"] == "reactive"
        assert row["outcome"]["type"] == "AttackAction"

    def test_exploration_range_defaults_from_config(self):
        """Test that the route search range comes from the engine config."""
        from engine.config import get_config
        assert BattleAI().exploration_range == get_config().exploration_range


class TestReactiveProfile:
    """Tests for the reactive seeker."""

    def test_attacks_first_opponent_in_reach(self, make_actor, battle_ai):
        """Test that the first opponent in turn order wins, not the closest."""
        bot = make_actor(1, "enemy", (2, 2), weapon=DAGGER)
        far = make_actor(2, "player", (3, 3))
        near = make_actor(3, "player", (2, 3))
        state = BattleState([bot, far, near], (6, 6))

        action = battle_ai.choose_action(state)

        assert action == AttackAction(target=2)

    def test_moves_towards_closest_opponent(self, make_actor, battle_ai):
        """Test that the cheapest adjacency route over all opponents is taken."""
        bot = make_actor(1, "enemy", (0, 0), weapon=DAGGER)
        state = BattleState(
            [bot, make_actor(2, "player", (6, 0)), make_actor(3, "player", (0, 4))],
            (8, 8),
        )

        action = battle_ai.choose_action(state)

        assert isinstance(action, MoveAction)
        assert action.positions == [Position(0, 1), Position(0, 2), Position(0, 3)]
        assert action.action_point_cost == 3

    @pytest.mark.parametrize("order, approached", [((2, 3), 2), ((3, 2), 3)])
    def test_equally_close_opponents_first_in_order_wins(self, make_actor, battle_ai, order, approached):
        """Test that with equal approach distances the earlier opponent in turn order is chosen."""
        bot = make_actor(1, "enemy", (4, 0), weapon=DAGGER)
        opponents = {2: make_actor(2, "player", (0, 0)), 3: make_actor(3, "player", (8, 0))}
        state = BattleState([bot] + [opponents[i] for i in order], (9, 1))

        action = battle_ai.choose_action(state)

        expected = {2: [Position(3, 0), Position(2, 0), Position(1, 0)],
                    3: [Position(5, 0), Position(6, 0), Position(7, 0)]}
        assert action.positions == expected[approached]
        assert action.total_distance == 3.0

    def test_move_truncated_by_action_points(self, make_actor, battle_ai):
        """Test that a long approach stops where the AP run out."""
        bot = make_actor(1, "enemy", (0, 0), weapon=DAGGER, action_points=1)
        state = BattleState([bot, make_actor(2, "player", (4, 0))], (8, 8))

        action = battle_ai.choose_action(state)

        assert action.positions == [Position(1, 0)]
        assert action.action_point_cost == 1

    def test_unarmed_without_action_points_passes(self, make_actor, battle_ai):
        """Test that a bot that can neither attack nor step passes."""
        bot = make_actor(1, "enemy", (0, 0), action_points=0)
        state = BattleState([bot, make_actor(2, "player", (3, 3))], (5, 5))
        assert battle_ai.choose_action(state) is None

    def test_too_tired_to_attack_in_reach(self, make_actor, battle_ai):
        """Test that an adjacent bot that cannot pay for an attack does not attack."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD, action_points=1)
        state = BattleState([bot, make_actor(2, "player", (1, 0))], (5, 5))
        # Already adjacent, so the route is the start cell alone
        assert battle_ai.choose_action(state) is None

    def test_unreachable_opponent_passes(self, make_actor, battle_ai):
        """Test that a walled-in opponent gives the bot nothing to do."""
        bot = make_actor(1, "enemy", (0, 0), weapon=DAGGER)
        walls = [(3, 0), (3, 1), (3, 2), (3, 3), (3, 4)]
        state = BattleState([bot, make_actor(2, "player", (4, 4))], (5, 5), obstacles=walls)
        assert battle_ai.choose_action(state) is None

    def test_ranged_attacks_from_distance(self, make_actor, battle_ai):
        """Test that a bow reaches opponents well outside melee."""
        bot = make_actor(1, "enemy", (0, 0), weapon=BOW)
        state = BattleState([bot, make_actor(2, "player", (4, 4))], (8, 8))
        assert battle_ai.choose_action(state) == AttackAction(target=2)

    def test_ranged_approaches_to_weapon_range(self, make_actor, battle_ai):
        """Test that an archer stops once the target is within bow range."""
        bot = make_actor(1, "enemy", (0, 0), weapon=BOW)
        state = BattleState([bot, make_actor(2, "player", (9, 0))], (12, 3))

        action = battle_ai.choose_action(state)

        assert action.positions[-1] == Position(3, 0)
        assert action.action_point_cost == 3

    def test_ranged_flees_melee(self, make_actor):
        """Test that a fleeing archer steps to a cell no opponent touches."""
        ai = BattleAI(rng=random.Random(7), exploration_range=60.0)
        bot = make_actor(1, "enemy", (2, 2), weapon=BOW, behaviour=ReactiveBehaviour(flees_melee=True))
        state = BattleState([bot, make_actor(2, "player", (3, 2))], (6, 6))

        action = ai.choose_action(state)

        assert isinstance(action, MoveAction)
        assert len(action.positions) == 1
        assert action.positions[0].x == 1

    def test_ranged_without_flee_shoots_in_melee(self, make_actor, battle_ai):
        """Test that archers only flee when their behaviour says so."""
        bot = make_actor(1, "enemy", (2, 2), weapon=BOW)
        state = BattleState([bot, make_actor(2, "player", (3, 2))], (6, 6))
        assert battle_ai.choose_action(state) == AttackAction(target=2)

    def test_cornered_archer_shoots(self, make_actor, battle_ai):
        """Test that an archer with no safe cell attacks instead."""
        bot = make_actor(1, "enemy", (0, 0), weapon=BOW, behaviour=ReactiveBehaviour(flees_melee=True))
        state = BattleState([bot, make_actor(2, "player", (1, 1))], (2, 2))
        assert battle_ai.choose_action(state) == AttackAction(target=2)


@pytest.fixture
def magi_party(make_actor):
    """
    A support caster with a wounded friend, facing three players:
    one unhurt, one bleeding, one neither.
    """
    magi = make_actor(10, "enemy", (0, 0), max_mana=5, spells=list(MAGI_SPELLS),
                      behaviour=GoalDirectedBehaviour())
    wounded = make_actor(11, "enemy", (1, 0), max_hp=10, hp=3)
    players = [
        make_actor(1, "player", (3, 0)),
        make_actor(2, "player", (3, 1), conditions=[Condition(name=BLEEDING)]),
        make_actor(3, "player", (3, 2)),
    ]
    return BattleState([magi, wounded] + players, (8, 8))


class TestSupportProfile:
    """Tests for the goal-directed support caster."""

    def test_goal_selection_never_picks_horrors_with_unbled_targets(self, magi_party):
        """Test every seeded pick: heal the wounded friend or wound an unbled player."""
        profile = get_ai_profile_handler(GoalDirectedBehaviour())
        magi = magi_party.get(10)
        allowed = {(MAGI_HEAL, 11), (MAGI_INFLICT_WOUNDS, 1), (MAGI_INFLICT_WOUNDS, 3)}

        for seed in range(20):
            ai = BattleAI(rng=random.Random(seed), exploration_range=60.0)
            assert profile.select_goal(magi, magi_party, ai) in allowed

    def test_heads_heals_most_wounded_friend(self, magi_party, fixed_random):
        """Test the heal branch on a winning coin flip."""
        profile = get_ai_profile_handler(GoalDirectedBehaviour())
        ai = BattleAI(rng=fixed_random(draw=0), exploration_range=60.0)
        assert profile.select_goal(magi_party.get(10), magi_party, ai) == (MAGI_HEAL, 11)

    def test_tails_wounds_an_unbled_opponent(self, magi_party, fixed_random):
        """Test the inflict-wounds branch on a losing coin flip."""
        profile = get_ai_profile_handler(GoalDirectedBehaviour())
        ai = BattleAI(rng=fixed_random(draw=1), exploration_range=60.0)
        assert profile.select_goal(magi_party.get(10), magi_party, ai) == (MAGI_INFLICT_WOUNDS, 1)

    def test_everyone_healthy_skips_heal(self, make_actor, fixed_random):
        """Test that a winning coin flip does not heal when nobody is hurt."""
        magi = make_actor(10, "enemy", (0, 0), max_mana=5, behaviour=GoalDirectedBehaviour())
        state = BattleState([magi, make_actor(1, "player", (2, 0))], (5, 5))
        ai = BattleAI(rng=fixed_random(draw=0), exploration_range=60.0)

        goal = get_ai_profile_handler(magi.behaviour).select_goal(magi, state, ai)

        assert goal == (MAGI_INFLICT_WOUNDS, 1)

    def test_all_bleeding_inflicts_horrors(self, make_actor, fixed_random):
        """Test that horrors are used once every opponent is bleeding."""
        magi = make_actor(10, "enemy", (0, 0), max_mana=5, behaviour=GoalDirectedBehaviour())
        bleeding = make_actor(1, "player", (2, 0), conditions=[Condition(name=BLEEDING)])
        state = BattleState([magi, bleeding], (5, 5))
        ai = BattleAI(rng=fixed_random(draw=1), exploration_range=60.0)

        goal = get_ai_profile_handler(magi.behaviour).select_goal(magi, state, ai)

        assert goal == (MAGI_INFLICT_HORRORS, 1)

    def test_casts_in_reach_and_clears_goal(self, magi_party, fixed_random):
        """Test that a goal in reach is cast and then forgotten."""
        ai = BattleAI(rng=fixed_random(draw=0), exploration_range=60.0)

        action = ai.choose_action(magi_party)

        assert action == CastSpellAction(spell=MAGI_HEAL, target=11)
        assert magi_party.get(10).behaviour.current_goal is None

    def test_cannot_afford_keeps_goal(self, magi_party, fixed_random):
        """Test that lacking AP passes but keeps the commitment."""
        magi = magi_party.get(10)
        magi.action_points = 1
        ai = BattleAI(rng=fixed_random(draw=0), exploration_range=60.0)

        assert ai.choose_action(magi_party) is None
        assert magi.behaviour.current_goal == (MAGI_HEAL, 11)

    def test_out_of_reach_moves_and_keeps_goal(self, make_actor, battle_ai):
        """Test that a distant goal target is approached over turns."""
        magi = make_actor(10, "enemy", (0, 0), max_mana=5, spells=list(MAGI_SPELLS),
                          behaviour=GoalDirectedBehaviour(current_goal=(MAGI_INFLICT_WOUNDS, 1)))
        state = BattleState([magi, make_actor(1, "player", (10, 0))], (12, 3))

        action = battle_ai.choose_action(state)

        assert isinstance(action, MoveAction)
        assert action.positions[-1] == Position(5, 0)
        assert action.action_point_cost == 5
        assert magi.behaviour.current_goal == (MAGI_INFLICT_WOUNDS, 1)

    def test_stale_goal_is_replaced(self, magi_party, fixed_random):
        """Test that a goal on a removed actor is dropped and a new one chosen."""
        magi = magi_party.get(10)
        magi.behaviour.current_goal = (MAGI_INFLICT_WOUNDS, 99)
        ai = BattleAI(rng=fixed_random(draw=1), exploration_range=60.0)

        action = ai.choose_action(magi_party)

        assert action == CastSpellAction(spell=MAGI_INFLICT_WOUNDS, target=1)

    def test_no_goal_available_passes(self, make_actor, battle_ai):
        """Test that a lone healthy caster has nothing to do."""
        magi = make_actor(10, "enemy", (0, 0), max_mana=5, behaviour=GoalDirectedBehaviour())
        state = BattleState([magi], (3, 3))
        assert battle_ai.choose_action(state) is None
        assert magi.behaviour.current_goal is None


class TestFighterProfile:
    """Tests for the sticky-target fighter."""

    def test_attacks_adjacent_target(self, make_actor, fixed_random):
        """Test that a fighter in reach of its target attacks it."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD, behaviour=FighterBehaviour())
        state = BattleState([bot, make_actor(2, "player", (1, 0))], (5, 5))
        ai = BattleAI(rng=fixed_random(roll=0.0), exploration_range=60.0)

        assert ai.choose_action(state) == AttackAction(target=2)
        assert bot.behaviour.current_target == 2

    def test_switch_chance_grows(self, make_actor, fixed_random):
        """Test the chance of switching: 0, then 0.01, then +0.1 per turn."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD, behaviour=FighterBehaviour())
        state = BattleState([bot, make_actor(2, "player", (1, 0))], (5, 5))
        ai = BattleAI(rng=fixed_random(roll=0.9), exploration_range=60.0)

        ai.choose_action(state)
        assert bot.behaviour.chance_of_switching_target == pytest.approx(0.01)
        ai.choose_action(state)
        assert bot.behaviour.chance_of_switching_target == pytest.approx(0.11)

    def test_switch_resets_chance(self, make_actor, fixed_random):
        """Test that a successful switch picks another opponent and resets the chance."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD,
                         behaviour=FighterBehaviour(current_target=2, chance_of_switching_target=0.5))
        state = BattleState(
            [bot, make_actor(2, "player", (1, 0)), make_actor(3, "player", (0, 1))],
            (5, 5),
        )
        ai = BattleAI(rng=fixed_random(roll=0.0), exploration_range=60.0)

        action = ai.choose_action(state)

        assert bot.behaviour.current_target == 3
        assert bot.behaviour.chance_of_switching_target == 0.0
        assert action == AttackAction(target=3)

    def test_dead_target_forces_new_one(self, make_actor, fixed_random):
        """Test that a target no longer in the battle is replaced."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD,
                         behaviour=FighterBehaviour(current_target=42))
        state = BattleState([bot, make_actor(2, "player", (1, 1))], (5, 5))
        ai = BattleAI(rng=fixed_random(roll=0.9), exploration_range=60.0)

        assert ai.choose_action(state) == AttackAction(target=2)

    def test_moves_towards_distant_target(self, make_actor, fixed_random):
        """Test that an out-of-reach target is approached."""
        bot = make_actor(1, "enemy", (0, 0), weapon=SWORD, behaviour=FighterBehaviour())
        state = BattleState([bot, make_actor(2, "player", (4, 0))], (6, 3))
        ai = BattleAI(rng=fixed_random(roll=0.9), exploration_range=60.0)

        action = ai.choose_action(state)

        assert isinstance(action, MoveAction)
        assert action.positions[-1] == Position(3, 0)

    def test_casts_damage_spell(self, make_actor, fixed_random):
        """Test that a damaging spell is a candidate alongside the weapon."""
        bot = make_actor(1, "enemy", (0, 0), max_mana=4, spells=[FIREBALL],
                         behaviour=FighterBehaviour())
        state = BattleState([bot, make_actor(2, "player", (3, 0))], (6, 3))
        ai = BattleAI(rng=fixed_random(roll=0.9), exploration_range=60.0)

        assert ai.choose_action(state) == CastSpellAction(spell=FIREBALL, target=2)
