"""
Candlestick record produced by the aggregator.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any


@dataclass(frozen=True)
class Candle:
    """
    One OHLC record for a single timestamp.

    - open: close of the previously emitted candle (own close for the first)
    - high/low: extreme prices seen at this timestamp
    - close: volume weighted average price at this timestamp
    """

    timestamp: str
    open: float
    high: float
    low: float
    close: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert candle to dictionary for serialization."""
        return asdict(self)
