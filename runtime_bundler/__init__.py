"""Runtime bundler (Python-first, stage-driven).

Core design goals:
- Fresh staging tree per build, never reused half-populated
- Fail-fast stages over an immutable build context
- Isolated interpreter dependencies (pydeps/)
- Relocatable bundle with a self-repairing launcher
- Centralized logging
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
