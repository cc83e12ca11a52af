"""DeepCurrent: self-evolving research episodes.

Runs research episodes against a per-topic, versioned strategy and feeds
episode outcomes back into strategy evolution.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
