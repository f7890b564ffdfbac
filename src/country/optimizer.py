import math
import multiprocessing
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Tuple

import networkx as nx
from tqdm import tqdm

from .country import Country
from .evaluation import is_better, lower_bound
from .exceptions import NoSolutionError, TargetCountError

# Relative slack when comparing a bound to the best variance, absorbs rounding
BOUND_TOLERANCE = 1e-12

# Best-variance cell inherited by pool workers
_shared_cell = None


@dataclass
class SearchStats:
    explored: int = 0
    pruned: int = 0
    terminals: int = 0

    def merge(self, other: 'SearchStats') -> None:
        self.explored += other.explored
        self.pruned += other.pruned
        self.terminals += other.terminals


class SharedBest:
    """
    Best terminal state found by one search.

    The variance lives in a multiprocessing.Value shared by every worker; its
    lock guards both plain reads and the compare-and-replace done at terminal
    states. The country is only kept by the process that recorded it.
    """

    def __init__(self, cell=None):
        self.cell = cell if cell is not None else multiprocessing.Value('d', math.inf)
        self.found_variance = math.inf
        self.country: Optional[Country] = None

    def variance(self) -> float:
        with self.cell.get_lock():
            return self.cell.value

    def offer(self, variance: float, country: Country) -> bool:
        with self.cell.get_lock():
            if not is_better(variance, self.cell.value):
                return False
            self.cell.value = variance
            self.found_variance = variance
            self.country = country
        return True


def can_improve(bound: float, best_variance: float) -> bool:
    return bound <= best_variance + BOUND_TOLERANCE * max(1.0, abs(best_variance))


def branch_and_bound(country: Country, target_count: int, best: SharedBest, stats: SearchStats) -> None:
    """
    Explore every fusion sequence from country down to target_count regions,
    skipping branches whose lower bound cannot beat the best variance known.
    """
    stats.explored += 1
    if len(country) == target_count:
        stats.terminals += 1
        best.offer(country.std_dev_sq(), country)
        return

    for left, right in country.links():
        child = country.copy()
        child.fuse_regions(left, right)
        if can_improve(lower_bound(child, target_count), best.variance()):
            branch_and_bound(child, target_count, best, stats)
        else:
            stats.pruned += 1


def _init_worker(cell) -> None:
    global _shared_cell
    _shared_cell = cell


def _explore_branch(branch: Country, target_count: int, cell=None) -> Tuple[float, Optional[Country], SearchStats]:
    """
    Search one first-level branch (can run in a pool worker).
    Returns the best variance and country this call recorded, if any.
    """
    best = SharedBest(cell if cell is not None else _shared_cell)
    stats = SearchStats()
    if can_improve(lower_bound(branch, target_count), best.variance()):
        branch_and_bound(branch, target_count, best, stats)
    else:
        stats.pruned += 1
    return best.found_variance, best.country, stats


class CountryOptimizer:
    def __init__(self, country: Country, workers: Optional[int] = None,
                 progress: bool = False, verbose: bool = False):
        self.country = country
        self.workers = workers if workers is not None else min(multiprocessing.cpu_count(), 48)
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        self.progress = progress
        self.verbose = verbose
        self.last_stats: Optional[SearchStats] = None

    def _check_target(self, target_count: int) -> None:
        n = len(self.country)
        if target_count < 0:
            raise TargetCountError(f"Target region count cannot be negative, got {target_count}")
        if target_count > n:
            raise TargetCountError(
                f"Target region count {target_count} exceeds the initial region count {n}")
        if target_count == 0 and n > 0:
            raise TargetCountError("Cannot fuse a nonempty country down to 0 regions")

        components = nx.number_connected_components(self.country.to_graph())
        if target_count < components:
            raise NoSolutionError(
                f"Country has {components} connected components, cannot reach {target_count} regions")

    def _branches(self) -> List[Country]:
        branches = []
        for left, right in self.country.links():
            branch = self.country.copy()
            branch.fuse_regions(left, right)
            branches.append(branch)
        return branches

    def optimize(self, target_count: int) -> Country:
        """
        Fuse regions until target_count remain, minimizing the GDP variance.

        Args:
            target_count: Number of regions of the result

        Returns:
            New country with target_count regions; self.country is left untouched
        """
        if target_count == len(self.country):
            self.last_stats = SearchStats()
            return self.country.copy()
        self._check_target(target_count)

        branches = self._branches()
        cell = multiprocessing.Value('d', math.inf)
        num_workers = min(self.workers, len(branches))

        if num_workers <= 1:
            results = [
                _explore_branch(branch, target_count, cell)
                for branch in tqdm(branches, desc="Fusion branches", disable=not self.progress)
            ]
        else:
            if self.verbose:
                print(f"Using {num_workers} cores for parallel processing")
            worker = partial(_explore_branch, target_count=target_count)
            with multiprocessing.Pool(num_workers, initializer=_init_worker, initargs=(cell,)) as pool:
                results = list(tqdm(
                    pool.imap_unordered(worker, branches),
                    total=len(branches),
                    desc="Fusion branches",
                    disable=not self.progress
                ))

        stats = SearchStats(explored=1)
        best_variance, best_country = math.inf, None
        for variance, country, branch_stats in results:
            stats.merge(branch_stats)
            if country is not None and (best_country is None or is_better(variance, best_variance)):
                best_variance, best_country = variance, country
        self.last_stats = stats

        if self.verbose:
            print(f"Explored {stats.explored} states, pruned {stats.pruned} branches, "
                  f"reached {stats.terminals} terminal states")

        if best_country is None:
            raise NoSolutionError("Could not find an optimal solution")

        if self.verbose:
            print(f"Best std_dev_sq: {best_variance}")
        return best_country


def optimize(country: Country, target_count: int, **kwargs) -> Country:
    """Shortcut for CountryOptimizer(country, **kwargs).optimize(target_count)."""
    return CountryOptimizer(country, **kwargs).optimize(target_count)
