from .host import HostPredicateProvider
from .static import StaticPredicateProvider, count_near_deadlines, load_facts

__all__ = [
    "HostPredicateProvider",
    "StaticPredicateProvider",
    "count_near_deadlines",
    "load_facts",
]
