import numpy as np
import pytest

from . import ibdbase
import ibdpair as ib
import ibdpair.bootstrap as bs
from ibdpair.exceptions import BootstrapDegenerateError, ValidationError


class TestBootstrapCI(ibdbase.IBDBase):
    def get_example(self, num_markers=100, seed=42):
        fs = self.get_frequencies(num_markers, 6, seed=seed)
        ds = self.get_distances(num_markers, num_chroms=5, seed=seed)
        return fs, ds

    def test_bounds_are_ordered(self):
        fs, ds = self.get_example()
        result = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.25, nboot=20, workers=1, seed=1)
        assert result.k[0] <= result.k[1]
        assert result.r[0] <= result.r[1]
        bounds = result.to_array()
        assert bounds.shape == (2, 2)
        np.testing.assert_array_equal(bounds[0], result.k)
        np.testing.assert_array_equal(bounds[1], result.r)
        assert result.nboot == 20
        assert result.seed == 1

    def test_reproducible_with_seed(self):
        fs, ds = self.get_example()
        result_1 = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=10, workers=1, seed=7)
        result_2 = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=10, workers=1, seed=7)
        assert result_1.k == result_2.k
        assert result_1.r == result_2.r

    @pytest.mark.parametrize("workers", [2, 3])
    def test_independent_of_worker_count(self, workers):
        fs, ds = self.get_example(num_markers=60)
        sequential = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=8, workers=1, seed=11)
        parallel = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=8, workers=workers, seed=11)
        assert sequential.k == parallel.k
        assert sequential.r == parallel.r

    def test_seed_is_drawn_when_missing(self):
        fs, ds = self.get_example(num_markers=30)
        result = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=3, workers=1)
        assert isinstance(result.seed, int)
        repeat = ib.bootstrap_ci(fs, ds, khat=5, rhat=0.5, nboot=3, workers=1, seed=result.seed)
        assert result.k == repeat.k
        assert result.r == repeat.r

    def test_confidence_widens_interval(self):
        fs, ds = self.get_example()
        narrow = ib.bootstrap_ci(fs, ds, 5, 0.25, confidence=50, nboot=20, workers=1, seed=3)
        wide = ib.bootstrap_ci(fs, ds, 5, 0.25, confidence=95, nboot=20, workers=1, seed=3)
        assert wide.r[0] <= narrow.r[0]
        assert wide.r[1] >= narrow.r[1]

    def test_options(self):
        fs, ds = self.get_example(num_markers=50)
        simulation_options = ib.SimulationOptions(epsilon=0.01)
        result = ib.bootstrap_ci(
            fs,
            ds,
            5,
            0.5,
            nboot=5,
            workers=1,
            seed=2,
            simulation_options=simulation_options,
            estimation_options=ib.EstimationOptions(epsilon=0.01, k_init=10, r_init=0.3),
        )
        assert result.r[0] <= result.r[1]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"confidence": 0},
            {"confidence": 100},
            {"nboot": 0},
            {"workers": 0},
            {"khat": -1},
            {"rhat": 1.5},
            {"khat": np.nan},
            {"rhat": np.nan},
        ],
    )
    def test_invalid_arguments(self, kwargs):
        fs, ds = self.get_example(num_markers=10)
        args = {"khat": 5, "rhat": 0.5, "nboot": 2, "workers": 1, "seed": 1}
        args.update(kwargs)
        with pytest.raises(ValueError):
            ib.bootstrap_ci(fs, ds, **args)

    def test_invalid_frequencies(self):
        fs, ds = self.get_example(num_markers=10)
        fs[0, :] = fs[0, ::-1]
        fs[0, 0] = 0
        with pytest.raises(ValidationError):
            ib.bootstrap_ci(fs, ds, 5, 0.5, nboot=2, workers=1, seed=1)

    def test_error_rate_too_large_for_cardinality(self):
        fs = self.get_uniform_frequencies(10, 10)
        ds = self.get_distances(10)
        with pytest.raises(ValidationError, match="error rate"):
            ib.bootstrap_ci(
                fs,
                ds,
                5,
                0.5,
                nboot=2,
                workers=1,
                seed=1,
                simulation_options=ib.SimulationOptions(epsilon=0.2),
            )

    def test_worker_replicates_use_shared_inputs(self, monkeypatch):
        fs, ds = self.get_example(num_markers=30)
        shared_inputs = (4, fs, ds, 5.0, 0.5, ib.SimulationOptions(), ib.EstimationOptions())
        monkeypatch.setattr(bs, "_shared_inputs", None)
        bs._init_worker(*shared_inputs)
        for replicate in range(3):
            expected = bs.run_replicate(replicate, *shared_inputs)
            assert bs._run_shared_replicate(replicate) == expected

    def test_coverage(self):
        # The 95% interval of r covers the data-generating value in most trials.
        fs, ds = self.get_example(num_markers=80, seed=8)
        k, r = 5, 0.5
        num_trials = 40
        num_covered = 0
        for trial in range(num_trials):
            Ys = ib.simulate(fs, ds, k=k, r=r, rng=trial)
            estimate = ib.estimate(fs, ds, Ys)
            result = ib.bootstrap_ci(
                fs, ds, estimate.khat, estimate.rhat, nboot=30, workers=1, seed=trial
            )
            num_covered += result.r[0] <= r <= result.r[1]
        assert num_covered / num_trials >= 0.8

    def test_nan_bound_is_fatal(self, monkeypatch):
        fs, ds = self.get_example(num_markers=10)
        monkeypatch.setattr(bs, "run_replicate", lambda *args: (np.nan, np.nan, False))
        with pytest.raises(BootstrapDegenerateError):
            ib.bootstrap_ci(fs, ds, 5, 0.5, nboot=4, workers=1, seed=1)

    def test_stalled_replicates_are_reported(self, monkeypatch):
        fs, ds = self.get_example(num_markers=10)
        outcomes = iter([(50.0, 0.5, True), (4.0, 0.2, False), (6.0, 0.3, False)])
        monkeypatch.setattr(bs, "run_replicate", lambda *args: next(outcomes))
        result = ib.bootstrap_ci(fs, ds, 5, 0.5, nboot=3, workers=1, seed=1)
        assert len(result.warnings) == 1
        assert "1 of 3" in str(result.warnings[0])


class TestReplicateRNG:
    def test_pure_function_of_seed_and_index(self):
        draws_1 = bs.get_replicate_rng(5, 3).random(4)
        draws_2 = bs.get_replicate_rng(5, 3).random(4)
        np.testing.assert_array_equal(draws_1, draws_2)

    def test_streams_differ(self):
        draws = [bs.get_replicate_rng(5, i).random() for i in range(10)]
        draws.append(bs.get_replicate_rng(6, 0).random())
        assert len(set(draws)) == len(draws)

    def test_matches_spawned_children(self):
        children = np.random.SeedSequence(5).spawn(3)
        for i, child in enumerate(children):
            expected = np.random.default_rng(child).random()
            assert bs.get_replicate_rng(5, i).random() == expected
