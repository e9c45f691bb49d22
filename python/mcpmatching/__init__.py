"""
Algorithm for finding a minimum-cost perfect matching in general graphs.
"""

__all__ = ["minimum_cost_perfect_matching",
           "maximum_cardinality_matching",
           "MatchingEngine",
           "Graph",
           "MatchingError",
           "InfeasibleInstanceError",
           "EPSILON"]

from .algorithm import (minimum_cost_perfect_matching,
                        maximum_cardinality_matching,
                        MatchingEngine,
                        MatchingError,
                        InfeasibleInstanceError,
                        EPSILON)
from .graph import Graph
