import math

import pytest

from country.evaluation import evaluate_fusion, is_better, lower_bound, optimal_std_dev_sq
from country.country import Country
from country.region import Region


class Test_Unit_Estimator:
    def test_optimal_std_dev_sq(self, diamond):
        assert optimal_std_dev_sq(diamond.gdp_values(), 2) == 1.0

    def test_order_does_not_matter(self):
        assert optimal_std_dev_sq([8, 3, 1, 2], 2) == 1.0

    def test_single_target_region(self):
        assert optimal_std_dev_sq([1, 2, 3], 1) == 0.0

    def test_no_crossover_falls_back_to_zero(self):
        # Mass 1 + 1 spread over the two 4s can level everything out: 5, 5
        assert optimal_std_dev_sq([1, 1, 4, 4], 2) == 0.0

    def test_merge_two_smallest(self):
        # One fusion left: 1 + 2 against 10 gives 3, 10
        assert optimal_std_dev_sq([1, 2, 10], 2) == pytest.approx(12.25)

    def test_level_above_next_value_pools_it(self):
        # 2 + 3 would overshoot 4, so 4 joins the pool and the bound drops to 0
        assert optimal_std_dev_sq([2, 3, 4], 2) == 0.0

    @pytest.mark.parametrize("target_count", [0, 4, 5, -1])
    def test_precondition(self, target_count):
        with pytest.raises(ValueError):
            optimal_std_dev_sq([1, 2, 3, 4], target_count)

    def test_lower_bound_at_target_is_exact(self, diamond):
        assert lower_bound(diamond, 4) == pytest.approx(diamond.std_dev_sq())
        assert lower_bound(diamond, 2) == 1.0


class Test_Unit_Ordering:
    def test_is_better(self):
        assert is_better(1.0, 2.0)
        assert not is_better(2.0, 1.0)
        assert not is_better(1.0, 1.0)
        assert is_better(1.0, math.inf)

    def test_nan_is_never_better(self):
        assert not is_better(math.nan, 1.0)
        assert not is_better(math.nan, math.inf)
        assert not is_better(math.nan, math.nan)
        assert is_better(1e9, math.nan)


class Test_Unit_Evaluation:
    def test_evaluate_fusion(self, diamond):
        fused = diamond.copy()
        fused.fuse_regions("A", "B")
        fused.fuse_regions("A-B", "C")

        metrics = evaluate_fusion(diamond, fused)

        assert metrics['connectivity'] is True
        assert metrics['coverage'] is True
        assert metrics['cut_links'] == 2
        assert metrics['num_regions'] == 2
        assert metrics['std_dev_sq'] == pytest.approx(1.0)
        assert metrics['std_dev'] == pytest.approx(1.0)
        assert metrics['mean_gdp'] == pytest.approx(7.0)
        assert metrics['balance'] == pytest.approx(1 - 1 / 7)

    def test_evaluate_disconnected_cluster(self, diamond):
        # A and C are not adjacent in the original graph
        fake = Country([
            Region("A-C", 4.0, members=frozenset({"A", "C"})),
            Region("B", 2.0),
            Region("D", 8.0),
        ])
        metrics = evaluate_fusion(diamond, fake)
        assert metrics['connectivity'] is False
