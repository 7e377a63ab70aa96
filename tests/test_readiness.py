"""
Tests for the readiness evaluator (safety/readiness.py).
"""

from localtypes import Position
from safety import ComponentRegistry, ReadinessEvaluator
from utils.loader import grid_from_layers


def evaluator_for(layers: list[list[str]]) -> ReadinessEvaluator:
    registry = ComponentRegistry()
    registry.build(grid_from_layers(layers))
    return ReadinessEvaluator(registry)


class TestIsReady:
    def test_top_layer_is_ready(self):
        evaluator = evaluator_for([["c"], ["c"]])
        top = evaluator.registry.component_at(Position(0, 0, 1))
        assert evaluator.is_ready(top)

    def test_component_below_target_is_not_ready(self):
        evaluator = evaluator_for([["c"], ["c"]])
        bottom = evaluator.registry.component_at(Position(0, 0, 0))
        assert not evaluator.is_ready(bottom)

    def test_one_blocked_column_blocks_whole_component(self):
        evaluator = evaluator_for([["ccc"], ["..c"]])
        bottom = evaluator.registry.component_at(Position(0, 0, 0))

        assert not evaluator.is_ready(bottom)
        assert evaluator.is_position_ready(Position(0, 0, 0))
        assert evaluator.blockers(bottom) == frozenset({Position(2, 0, 0)})

    def test_dig_above_does_not_block(self):
        evaluator = evaluator_for([["c"], ["d"]])
        bottom = evaluator.registry.component_at(Position(0, 0, 0))
        assert evaluator.is_ready(bottom)

    def test_clearing_upper_component_makes_lower_ready(self):
        evaluator = evaluator_for([["cc"], ["cc"]])
        bottom = evaluator.registry.component_at(Position(0, 0, 0))
        assert not evaluator.is_ready(bottom)

        evaluator.registry.remove(Position(0, 0, 1))
        assert not evaluator.is_ready(bottom)

        evaluator.registry.remove(Position(1, 0, 1))
        assert evaluator.is_ready(bottom)
        assert evaluator.blockers(bottom) == frozenset()

    def test_is_pure(self):
        evaluator = evaluator_for([["c"], ["c"]])
        bottom = evaluator.registry.component_at(Position(0, 0, 0))
        before = {slot: set(c) for slot, c in evaluator.registry.components()}
        evaluator.is_ready(bottom)
        evaluator.blockers(bottom)
        assert {slot: set(c) for slot, c in evaluator.registry.components()} == before
