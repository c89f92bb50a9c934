"""Built-in demonstration graph: a small DI application module tree."""

from __future__ import annotations

from .graph import Graph
from .models import Edge, Node

_NODES = [
    ("AppModule", "module", "singleton"),
    ("NetworkModule", "module", "singleton"),
    ("DatabaseModule", "module", "singleton"),
    ("AuthService", "service", "singleton"),
    ("UserRepository", "repository", "singleton"),
    ("ApiClient", "service", "singleton"),
    ("CacheManager", "service", "singleton"),
    ("LoggingService", "service", "singleton"),
    ("AnalyticsModule", "module", "singleton"),
    ("EventTracker", "service", "singleton"),
    ("ConfigService", "service", "singleton"),
    ("FeatureModule", "module", "prototype"),
    ("PaymentService", "service", "singleton"),
    ("NotificationService", "service", "singleton"),
]

_LINKS = [
    ("AppModule", "NetworkModule", "provides"),
    ("AppModule", "DatabaseModule", "provides"),
    ("AppModule", "AnalyticsModule", "provides"),
    ("NetworkModule", "ApiClient", "provides"),
    ("NetworkModule", "ConfigService", "injects"),
    ("DatabaseModule", "UserRepository", "provides"),
    ("DatabaseModule", "CacheManager", "provides"),
    ("AuthService", "UserRepository", "injects"),
    ("AuthService", "ApiClient", "injects"),
    ("UserRepository", "CacheManager", "injects"),
    ("ApiClient", "LoggingService", "injects"),
    ("LoggingService", "ConfigService", "injects"),
    ("AnalyticsModule", "EventTracker", "provides"),
    ("EventTracker", "ApiClient", "injects"),
    ("FeatureModule", "PaymentService", "provides"),
    ("PaymentService", "ApiClient", "injects"),
    ("NotificationService", "EventTracker", "injects"),
    ("NotificationService", "UserRepository", "injects"),
    ("ConfigService", "LoggingService", "injects"),
]


def sample_graph() -> Graph:
    """Return a fresh copy of the demonstration graph.

    It contains one deliberate cycle (LoggingService <-> ConfigService).
    """
    nodes = [Node(node_id=i, node_type=t, scope=s) for i, t, s in _NODES]
    edges = [Edge(src=s, dst=d, edge_type=t) for s, d, t in _LINKS]
    return Graph(nodes, edges)
