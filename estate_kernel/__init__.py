"""
Estate Kernel

Domain primitives for the estate settlement engine:
- Money and currency value objects (Decimal only, no conversion)
- Typed exception hierarchy with machine-readable codes
- Tagged-union domain events and command results
- Structured JSON logging
- SQLAlchemy base, engine and estate snapshot records
"""

__version__ = "0.1.0"
