"""
Domain Layer - Metric definitions

This layer contains:
- Entities: metric definitions and observed points
- Interfaces: the writer contract implemented by infrastructure

No external dependencies allowed in this layer.
"""
