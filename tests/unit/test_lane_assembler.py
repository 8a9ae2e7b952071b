"""Tests for lane assembly."""

import random
from itertools import islice, product

import pytest

from checkmyindex.exceptions import InvalidInputError, NoSolutionFoundError
from checkmyindex.models.index import Combination, IndexPool
from checkmyindex.models.search import (
    SearchContext,
    SearchSettings,
    UniquenessConstraint,
)
from checkmyindex.services.color_model import ColorModel
from checkmyindex.services.combination_generator import CombinationGenerator
from checkmyindex.services.lane_assembler import LaneAssembler


def _assert_lanes_compatible(design, chemistry):
    for lane in design.lanes:
        sequences = [index.sequence for index in lane.indexes]
        assert ColorModel.is_compatible(sequences, chemistry)


class TestAssemble:
    def test_partial_then_complete(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(5, 4), multiplexing_rate=4, nb_lanes=3, seed=1
        )

        assert design.nb_lanes == 3
        assert [lane.number for lane in design.lanes] == [1, 2, 3]
        assert all(lane.size == 4 for lane in design.lanes)
        assert all(len(lane.ids) == 4 for lane in design.lanes)
        _assert_lanes_compatible(design, four_channel)

    def test_complete_lane(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(4, 4), multiplexing_rate=3, nb_lanes=2, complete_lane=True, seed=2
        )

        assert design.nb_samples == 6
        _assert_lanes_compatible(design, four_channel)

    def test_index_constraint_uses_each_index_once(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(6, 6),
            multiplexing_rate=4,
            nb_lanes=3,
            constraint=UniquenessConstraint.INDEX,
            max_trials=50,
            seed=3,
        )

        used = [index_id for lane in design.lanes for index_id in lane.ids]
        assert len(used) == len(set(used)) == 12
        _assert_lanes_compatible(design, four_channel)

    def test_lane_constraint_uses_each_combination_once(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(3, 3),
            multiplexing_rate=3,
            nb_lanes=6,
            constraint="lane",
            max_trials=50,
            seed=4,
        )

        lane_sets = [lane.ids for lane in design.lanes]
        assert len(set(lane_sets)) == 6

    def test_no_constraint_allows_repeated_lanes(self, make_pool, four_channel):
        # Only one compatible combination exists: {red, green}
        design = LaneAssembler(four_channel).assemble(
            make_pool(1, 1), multiplexing_rate=2, nb_lanes=3, seed=5
        )

        assert len({lane.ids for lane in design.lanes}) == 1
        assert design.nb_lanes == 3

    def test_lane_constraint_exhausts_trials(self, make_pool, four_channel):
        with pytest.raises(NoSolutionFoundError) as exc_info:
            LaneAssembler(four_channel).assemble(
                make_pool(2, 1),
                multiplexing_rate=3,
                nb_lanes=2,
                constraint=UniquenessConstraint.LANE,
                max_trials=3,
            )
        assert exc_info.value.trials == 3

    def test_incompatible_pool_exhausts_trials(self, make_pool, four_channel):
        # Red indexes only: no position ever shows green
        for complete_lane in (False, True):
            with pytest.raises(NoSolutionFoundError):
                LaneAssembler(four_channel).assemble(
                    make_pool(6, 0),
                    multiplexing_rate=3,
                    nb_lanes=2,
                    complete_lane=complete_lane,
                    max_trials=2,
                )

    def test_with_compatibility_graph(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(6, 6), multiplexing_rate=6, nb_lanes=2, use_graph=True, seed=6
        )
        _assert_lanes_compatible(design, four_channel)

    def test_random_sampling_for_large_pools(self, make_pool, four_channel):
        settings = SearchSettings(exhaustive_limit=10, max_random_draws=200)
        design = LaneAssembler(four_channel, settings).assemble(
            make_pool(12, 12),
            multiplexing_rate=8,
            nb_lanes=3,
            constraint=UniquenessConstraint.INDEX,
            complete_lane=True,
            max_trials=20,
            seed=7,
        )

        used = [index_id for lane in design.lanes for index_id in lane.ids]
        assert len(used) == len(set(used)) == 24
        _assert_lanes_compatible(design, four_channel)

    def test_same_seed_same_design(self, make_pool, four_channel):
        assembler = LaneAssembler(four_channel)
        first = assembler.assemble(make_pool(6, 6), multiplexing_rate=3, nb_lanes=4, seed=11)
        second = assembler.assemble(make_pool(6, 6), multiplexing_rate=3, nb_lanes=4, seed=11)

        assert [lane.indexes for lane in first.lanes] == [lane.indexes for lane in second.lanes]

    def test_parallel_trials(self, make_pool, four_channel):
        design = LaneAssembler(four_channel).assemble(
            make_pool(6, 6),
            multiplexing_rate=3,
            nb_lanes=4,
            constraint=UniquenessConstraint.INDEX,
            max_trials=8,
            seed=8,
            workers=2,
        )

        assert design.nb_lanes == 4
        _assert_lanes_compatible(design, four_channel)

    def test_rate_larger_than_pool(self, make_pool, four_channel):
        with pytest.raises(InvalidInputError):
            LaneAssembler(four_channel).assemble(
                make_pool(1, 1), multiplexing_rate=3, nb_lanes=1
            )

    def test_zero_trials(self, make_pool, four_channel):
        with pytest.raises(InvalidInputError):
            LaneAssembler(four_channel).assemble(
                make_pool(2, 2), multiplexing_rate=2, nb_lanes=1, max_trials=0
            )


class TestRunTrial:
    def test_lanes_keep_pool_order(self, make_pool, four_channel):
        pool = list(make_pool(3, 3))
        ctx = SearchContext(chemistry=four_channel, pool=pool)
        generator = CombinationGenerator(four_channel)
        assembler = LaneAssembler(four_channel)

        lanes = assembler.run_trial(
            ctx, generator, 2, 3, 2, UniquenessConstraint.NONE, random.Random(0)
        )

        position = {index.id: i for i, index in enumerate(pool)}
        for lane in lanes:
            order = [position[index.id] for index in lane.indexes]
            assert order == sorted(order)

    def test_completion_respects_index_ledger(self, make_pool, four_channel):
        pool = list(make_pool(2, 2))
        ctx = SearchContext(chemistry=four_channel, pool=pool)
        generator = CombinationGenerator(four_channel)
        assembler = LaneAssembler(four_channel)

        # 4 indexes cannot fill two lanes of 3 without reuse
        lanes = assembler.run_trial(
            ctx, generator, 2, 3, 2, UniquenessConstraint.INDEX, random.Random(0)
        )
        assert lanes is None

    def test_cores_are_completed_with_available_indexes(self, make_pool, four_channel):
        pool = list(make_pool(3, 3))
        ctx = SearchContext(chemistry=four_channel, pool=pool)
        generator = CombinationGenerator(four_channel)
        ctx.candidates[2] = generator.compatible_combinations(pool, 2)
        assembler = LaneAssembler(four_channel)

        lanes = assembler.run_trial(
            ctx, generator, 2, 3, 2, UniquenessConstraint.INDEX, random.Random(1)
        )

        assert lanes is not None
        assert lanes[0].ids.isdisjoint(lanes[1].ids)
        assert all(isinstance(lane.combination, Combination) for lane in lanes)


class TestCoreSizes:
    """Tests for moving to larger cores when small ones cannot succeed."""

    # Four-channel color patterns: no two of X (RRG), Y (RGR) and Z (GRR)
    # are compatible, one of each is. W (GGR) only pairs with X.
    POOL = [
        ("X1", "AAG"),
        ("X2", "CCT"),
        ("Y1", "AGA"),
        ("Y2", "CTC"),
        ("Z1", "GAA"),
        ("Z2", "TCC"),
        ("W", "GGA"),
    ]

    def _pool(self):
        return list(IndexPool.from_pairs(self.POOL))

    def test_pairs_cannot_fill_disjoint_lanes(self, four_channel):
        pool = self._pool()
        ctx = SearchContext(chemistry=four_channel, pool=pool)
        generator = CombinationGenerator(four_channel)
        ctx.candidates[2] = generator.compatible_combinations(pool, 2)

        # Both compatible pairs contain W
        assert len(ctx.candidates[2]) == 2
        assert not LaneAssembler._cores_can_fill(ctx, 2, 2, UniquenessConstraint.INDEX)
        assert LaneAssembler._cores_can_fill(ctx, 2, 2, UniquenessConstraint.LANE)

    def test_larger_cores_succeed_when_pairs_cannot(self, four_channel):
        design = LaneAssembler(four_channel).assemble(
            self._pool(),
            multiplexing_rate=3,
            nb_lanes=2,
            constraint=UniquenessConstraint.INDEX,
            max_trials=30,
            seed=0,
        )

        assert design.nb_lanes == 2
        assert design.lanes[0].ids.isdisjoint(design.lanes[1].ids)
        _assert_lanes_compatible(design, four_channel)

    def test_trials_are_shared_across_core_sizes(self, make_pool, four_channel):
        # 2 red and 1 green: a single lane of 3 exists, the second lane can't differ
        with pytest.raises(NoSolutionFoundError) as exc_info:
            LaneAssembler(four_channel).assemble(
                make_pool(2, 1),
                multiplexing_rate=3,
                nb_lanes=2,
                constraint=UniquenessConstraint.LANE,
                max_trials=7,
            )
        assert exc_info.value.trials == 7

    @pytest.mark.parametrize(
        "start, rate, max_trials, expected",
        [
            (2, 4, 10, [2, 3, 4]),
            (4, 4, 10, [4]),
            (2, 12, 3, [2, 7, 12]),
            (2, 12, 1, [2]),
        ],
    )
    def test_schedule(self, start, rate, max_trials, expected):
        assert LaneAssembler._core_size_schedule(start, rate, max_trials) == expected


class TestUnusableIndexes:
    def test_forbidden_prefix_indexes_are_never_drawn(self, two_channel):
        good = [("ok1", "ACACACAC"), ("ok2", "CACACACA"), ("ok3", "TCTCTCTC")]
        blocked = [
            (f"gg{i:02d}", "GG" + "".join(p))
            for i, p in enumerate(islice(product("ACT", repeat=6), 12))
        ]
        pool = IndexPool.from_pairs(good + blocked)
        assembler = LaneAssembler(two_channel)

        for seed in range(20):
            design = assembler.assemble(pool, multiplexing_rate=3, nb_lanes=1, max_trials=1, seed=seed)
            assert design.lanes[0].ids == {"ok1", "ok2", "ok3"}

    def test_rate_counts_usable_indexes_only(self, two_channel):
        pool = IndexPool.from_pairs([("ok1", "ACAC"), ("gg1", "GGAC"), ("gg2", "GGCA")])
        with pytest.raises(InvalidInputError, match="usable"):
            LaneAssembler(two_channel).assemble(pool, multiplexing_rate=2, nb_lanes=1)
