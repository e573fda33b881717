"""
Replay exchange: a discrete-time double-auction simulator.

Replays historical bid/ask data and lets one simulated trader place
orders into the same timeline.
"""

__version__ = "1.0.0"
