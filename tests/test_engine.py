import asyncio
from datetime import datetime
import random

import pytest

from conftest import InFlightTracker, ScriptedSim, counting_populator
from simevo.evolution.engine import EngineConfig, Evaluator, evaluator
from simevo.exceptions import CandidateError, ConfigurationError
from simevo.problems.target_vector import TargetVectorPopulator


def test_trivial_convergence_runs_one_generation():
    populate, created = counting_populator(start=1.0, delta=0.5)
    history = []

    population = asyncio.run(
        evaluator(
            populate,
            population_size=4,
            elimination_ratio=0.5,
            stopping_function=lambda pair: pair.generation == 1,
            peek=history.append,
            sort_descending=True,
            seed=3,
        )
    )

    assert len(created) == 4
    assert [pair.generation for pair in history] == [1]
    assert history[0].fitness_scores == (4.0, 3.0, 2.0, 1.0)
    assert len(population) == 4

    survivors, offspring = population[:2], population[2:]
    assert [sim.score for sim in survivors] == [4.0, 3.0]
    assert all(sim.mutations == 0 for sim in survivors)
    assert all(sim.mutations == 1 for sim in offspring)
    assert all(sim.score in (4.5, 3.5) for sim in offspring)


def test_generation_zero_uses_run_seed():
    seeds = []

    def populate(params):
        seeds.append(params.seed)
        return ScriptedSim(1.0)

    asyncio.run(
        evaluator(populate, 3, 0.3, lambda pair: True, seed=1234)
    )
    assert seeds == [1234, 1234, 1234]


def test_elitism_survivors_carried_over_as_unmutated_copies():
    populate, created = counting_populator(start=1.0, delta=100.0)

    population = asyncio.run(
        evaluator(populate, 6, 0.5, lambda pair: pair.generation == 1, seed=0)
    )

    best = sorted(created, key=lambda sim: sim.score, reverse=True)[:3]
    carried = population[:3]
    assert [sim.uid for sim in carried] == [sim.uid for sim in best]
    for original, copy in zip(best, carried):
        assert copy is not original
        assert copy.score == original.score
        assert copy.mutations == 0
    assert {sim.uid for sim in population[3:]} <= {sim.uid for sim in best}


def test_population_size_is_invariant():
    populate, _ = counting_populator(delta=1.0)
    sizes = []

    population = asyncio.run(
        evaluator(
            populate,
            population_size=7,
            elimination_ratio=0.3,
            stopping_function=lambda pair: pair.generation == 5,
            peek=lambda pair: sizes.append(len(pair.fitness_scores)),
            seed=11,
        )
    )

    assert sizes == [7] * 5
    assert len(population) == 7


def test_error_minimization_stops_at_analytic_generation():
    start, decrement, threshold = 1.0, 0.25, 0.01

    def populate(params):
        return ScriptedSim(start, delta=-decrement)

    history = []
    asyncio.run(
        evaluator(
            populate,
            population_size=8,
            elimination_ratio=0.5,
            stopping_function=lambda pair: pair.nth_percentile_fitness(0) < threshold,
            peek=history.append,
            sort_descending=False,
            seed=5,
        )
    )

    # Generation g's minimum has been decremented g - 1 times.
    expected = int((start - threshold) // decrement) + 1 + 1
    assert len(history) == expected == 5
    assert [pair.best for pair in history] == [1.0, 0.75, 0.5, 0.25, 0.0]
    assert not history[-1].maximize


def test_concurrent_evaluation_runs_each_candidate_once_per_generation():
    tracker = InFlightTracker()
    evaluated = []

    class SlowSim(ScriptedSim):
        async def eval(self):
            if self.evals:
                raise AssertionError(f"candidate {self.uid} evaluated twice")
            self.evals += 1
            evaluated.append(self)
            await tracker.hold(random.Random(self.uid).random() * 0.002)
            return self.score

        def copy(self):
            return SlowSim(self.score, self.delta, uid=self.uid)

    rng = random.Random(9)

    def populate(params):
        return SlowSim(rng.random(), delta=0.01)

    generations = 4
    asyncio.run(
        evaluator(
            populate,
            population_size=50,
            elimination_ratio=0.5,
            stopping_function=lambda pair: pair.generation == generations,
            seed=9,
        )
    )

    assert len(evaluated) == 50 * generations
    assert len({id(sim) for sim in evaluated}) == len(evaluated)
    assert all(sim.evals == 1 for sim in evaluated)
    assert tracker.peak > 1


def test_max_concurrent_evaluations_bounds_in_flight():
    tracker = InFlightTracker()

    class SlowSim(ScriptedSim):
        async def eval(self):
            await tracker.hold(0.001)
            return self.score

        def copy(self):
            return SlowSim(self.score, self.delta, uid=self.uid)

    asyncio.run(
        evaluator(
            lambda params: SlowSim(1.0),
            population_size=10,
            elimination_ratio=0.5,
            stopping_function=lambda pair: pair.generation == 2,
            max_concurrent_evaluations=2,
        )
    )
    assert tracker.peak == 2


def test_same_seed_gives_identical_runs():
    async def run_once():
        history = []
        population = await evaluator(
            TargetVectorPopulator(target=[0.5, -0.5, 0.25], mutation_scale=0.2),
            population_size=12,
            elimination_ratio=0.5,
            stopping_function=lambda pair: pair.generation == 6,
            peek=history.append,
            sort_descending=False,
            seed=2024,
        )
        genes = [[gene.template.value for gene in sim.genes] for sim in population]
        return history, genes

    first_history, first_genes = asyncio.run(run_once())
    second_history, second_genes = asyncio.run(run_once())

    assert first_history == second_history
    assert first_genes == second_genes


def test_stopping_checked_after_peek():
    events = []

    def peek(pair):
        events.append(("peek", pair.generation))

    def should_stop(pair):
        events.append(("stop?", pair.generation))
        return pair.generation == 2

    asyncio.run(
        evaluator(lambda params: ScriptedSim(1.0), 2, 0.5, should_stop, peek=peek)
    )
    assert events == [("peek", 1), ("stop?", 1), ("peek", 2), ("stop?", 2)]


def test_stop_request_honoured_at_generation_boundary():
    config = EngineConfig(population_size=4, elimination_ratio=0.25, seed=1)
    generations = []

    def peek(pair):
        generations.append(pair.generation)
        if pair.generation == 3:
            engine.stop()

    engine = Evaluator(
        lambda params: ScriptedSim(1.0), config, lambda pair: False, peek=peek
    )
    population = asyncio.run(engine.run())

    assert generations == [1, 2, 3]
    assert len(population) == 4
    assert engine.last_generation.generation == 3
    assert not engine.is_running()


def test_metrics_track_the_run():
    config = EngineConfig(population_size=5, elimination_ratio=0.4, seed=8)
    engine = Evaluator(
        lambda params: ScriptedSim(1.0, delta=1.0),
        config,
        lambda pair: pair.generation == 3,
    )
    asyncio.run(engine.run())

    assert config.survivor_count == 3
    assert engine.metrics.total_generations == 3
    assert engine.metrics.evaluations_run == 15
    assert engine.metrics.mutations_created == 6
    assert engine.metrics.survivors_kept == 9
    assert engine.metrics.last_generation_time is not None
    assert len(engine.history) == 3

    summary = engine.metrics.to_dict()
    assert isinstance(summary["last_generation_time"], str)
    assert (
        datetime.fromisoformat(summary["last_generation_time"])
        == engine.metrics.last_generation_time
    )
    assert summary["total_generations"] == 3


def test_candidate_failure_aborts_generation():
    slow = []

    class FlakySim(ScriptedSim):
        async def eval(self):
            if self.score < 0:
                raise ValueError("diverged")
            slow.append(self)
            await asyncio.sleep(30)
            return self.score

        def copy(self):
            return FlakySim(self.score, self.delta, uid=self.uid)

    scores = iter([1.0, 2.0, -1.0, 3.0])

    async def run():
        return await asyncio.wait_for(
            evaluator(
                lambda params: FlakySim(next(scores)),
                4,
                0.5,
                lambda pair: True,
            ),
            timeout=5,
        )

    with pytest.raises(CandidateError) as info:
        asyncio.run(run())

    assert info.value.generation == 1
    assert isinstance(info.value.__cause__, ValueError)
    assert len(slow) == 3


def test_build_failure_is_fatal():
    class BrokenBuild(ScriptedSim):
        async def build(self):
            raise RuntimeError("no environment")

    with pytest.raises(CandidateError):
        asyncio.run(
            evaluator(lambda params: BrokenBuild(1.0), 3, 0.3, lambda pair: True)
        )


def test_mutation_failure_is_fatal():
    class BrokenMutation(ScriptedSim):
        def mutate(self):
            raise RuntimeError("bad gene")

        def copy(self):
            return BrokenMutation(self.score, uid=self.uid)

    with pytest.raises(CandidateError) as info:
        asyncio.run(
            evaluator(lambda params: BrokenMutation(1.0), 4, 0.5, lambda pair: True)
        )
    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.parametrize(
    "population_size, elimination_ratio",
    [(0, 0.5), (-3, 0.5), (10, -0.1), (10, 1.5), (4, 1.0), (1, 0.5)],
)
def test_invalid_configuration_rejected_before_running(population_size, elimination_ratio):
    calls = []

    def populate(params):
        calls.append(params)
        return ScriptedSim(1.0)

    with pytest.raises(ConfigurationError):
        asyncio.run(
            evaluator(populate, population_size, elimination_ratio, lambda pair: True)
        )
    assert calls == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"population_size": 0, "elimination_ratio": 0.5},
        {"population_size": 10, "elimination_ratio": 1.5},
        {"population_size": 4, "elimination_ratio": 1.0},
        {"population_size": 4, "elimination_ratio": 0.5, "max_concurrent_evaluations": 0},
    ],
)
def test_engine_config_construction_raises_configuration_error(kwargs):
    with pytest.raises(ConfigurationError):
        EngineConfig(**kwargs)
    assert issubclass(ConfigurationError, ValueError)
