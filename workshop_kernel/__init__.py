"""
Workshop Kernel

Deterministic core of the workshop-management application:
- Day-granularity date ranges with local-midnight normalization
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Pay-period persistence with an atomic PAID transition
"""

__version__ = "0.1.0"
