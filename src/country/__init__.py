"""
Region fusion: cluster adjacent regions into a target number of regions
with minimal GDP variance, by exact branch-and-bound search.
"""

from .region import Region, parse_region, format_region
from .country import Country
from .exceptions import CountryError, InputError, TargetCountError, NoSolutionError, FusionError
from .evaluation import optimal_std_dev_sq, evaluate_fusion, is_better
from .graph_loader import load_country, parse_country, validate_country, get_country_stats
from .optimizer import CountryOptimizer, optimize

__all__ = [
    'Region',
    'parse_region',
    'format_region',
    'Country',
    'CountryError',
    'InputError',
    'TargetCountError',
    'NoSolutionError',
    'FusionError',
    'optimal_std_dev_sq',
    'evaluate_fusion',
    'is_better',
    'load_country',
    'parse_country',
    'validate_country',
    'get_country_stats',
    'CountryOptimizer',
    'optimize'
]
