"""Enumerations shared across the cache layers."""

from enum import Enum


class PartitionKind(str, Enum):
    """The three cache partitions owned by a worker version."""

    STATIC = "static"
    DYNAMIC = "dynamic"
    IMAGE = "image"


class Strategy(str, Enum):
    """Caching strategy applied to an intercepted request."""

    CACHE_FIRST = "cache-first"
    NETWORK_FIRST = "network-first"
    STALE_WHILE_REVALIDATE = "stale-while-revalidate"


class LifecycleState(str, Enum):
    """Worker lifecycle states.

    new -> installing -> waiting -> activating -> active. A failed install
    leaves the worker redundant.
    """

    NEW = "new"
    INSTALLING = "installing"
    WAITING = "waiting"
    ACTIVATING = "activating"
    ACTIVE = "active"
    REDUNDANT = "redundant"
