import math
from typing import Any, Dict, Iterable, List, Set

import networkx as nx
import numpy as np

from .country import Country


def is_better(candidate: float, incumbent: float) -> bool:
    """
    Total order used to compare variances.
    NaN sorts as the minimum: it never beats anything and anything beats it.
    """
    if math.isnan(candidate):
        return False
    if math.isnan(incumbent):
        return True
    return candidate < incumbent


def optimal_std_dev_sq(gdp_values: Iterable[float], target_count: int) -> float:
    """
    Lower bound on the variance reachable by fusing the regions down to
    target_count regions, ignoring adjacency.

    The smallest values are merged into one mass that is spread evenly over
    the smallest remaining groups, sweeping upward until the spread level
    drops below the next kept value. If the level never drops below it,
    every group could sit at the mean and the bound is 0.

    Args:
        gdp_values: Current GDP of every region
        target_count: Number of regions to reach, 0 < target_count < len(gdp_values)

    Returns:
        Lower bound on the population variance
    """
    gdp_sorted = np.sort(np.asarray(list(gdp_values), dtype=float))
    n = len(gdp_sorted)
    if not 0 < target_count < n:
        raise ValueError(f"target_count must be in (0, {n}), got {target_count}")

    to_fuse = n - target_count
    to_spread = gdp_sorted[:to_fuse].sum()
    to_spread_on = gdp_sorted[to_fuse:]
    target_avg = (to_spread + to_spread_on.sum()) / target_count

    widths = np.arange(1, target_count)
    merged = to_spread + np.cumsum(to_spread_on[:-1])
    crossovers = np.flatnonzero(merged < to_spread_on[1:] * widths)
    if len(crossovers) == 0:
        return 0.0

    width = int(widths[crossovers[0]])
    spread_gdp = merged[crossovers[0]] / width
    kept = to_spread_on[width:]
    return float(
        ((target_avg - spread_gdp) ** 2 * width + ((target_avg - kept) ** 2).sum())
        / target_count
    )


def lower_bound(country: Country, target_count: int) -> float:
    """Estimator bound, or the exact variance once the target is reached."""
    if len(country) == target_count:
        return country.std_dev_sq()
    return optimal_std_dev_sq(country.gdp_values(), target_count)


def evaluate_fusion(original: Country, fused: Country) -> Dict[str, Any]:
    """
    Evaluate a fused country against the country it was built from.

    Args:
        original: Country before any fusion
        fused: Result of the optimization

    Returns:
        Dictionary with metrics:
        - connectivity: Whether each fused region is connected in the original graph
        - cut_links: Number of original links between different fused regions
        - coverage: Whether every original region belongs to exactly one fused region
        - std_dev_sq / std_dev / mean_gdp: GDP statistics of the fused country
        - balance: 1 - max relative deviation from the mean GDP
    """
    G = original.to_graph()
    partition: List[Set[str]] = [set(region.members) for region in fused.iter_regions()]
    metrics: Dict[str, Any] = {}

    for part in partition:
        if not part or not part <= set(G.nodes) or not nx.is_connected(G.subgraph(part)):
            metrics['connectivity'] = False
            break
    else:
        metrics['connectivity'] = True

    node_to_part = {}
    for i, part in enumerate(partition):
        for node in part:
            node_to_part[node] = i
    metrics['coverage'] = (
        sum(len(part) for part in partition) == len(node_to_part) == len(original)
        and set(node_to_part) == set(original.regions)
    )

    cut_links = 0
    for u, v in G.edges():
        if node_to_part.get(u) != node_to_part.get(v):
            cut_links += 1
    metrics['cut_links'] = cut_links

    gdp = fused.gdp_values()
    metrics['num_regions'] = len(fused)
    metrics['std_dev_sq'] = fused.std_dev_sq()
    metrics['std_dev'] = fused.std_dev()
    metrics['mean_gdp'] = float(np.mean(gdp))
    if metrics['mean_gdp'] != 0:
        metrics['balance'] = 1 - float(np.max(np.abs(gdp - metrics['mean_gdp']))) / abs(metrics['mean_gdp'])
    else:
        metrics['balance'] = 0.0

    return metrics
