"""
Twenty48 - 2048 Board Engine

A deterministic, injectable-randomness engine for the 2048 sliding tile game.
The engine provides:
- An immutable board with rotate/flip transforms
- The compress-and-merge move algorithm
- Random tile spawning from an injected source
- Sessions with configurable scoring and win policies
"""

__version__ = "0.1.0"
