from enum import Enum
from typing import Literal


class ScoreMarket(str, Enum):
    """Markets with their own scoring profile."""

    DEFAULT = "DEFAULT"
    CRYPTO = "CRYPTO"
    AEX = "AEX"
    DAX = "DAX"
    DOWJONES = "DOWJONES"
    ETFS = "ETFS"
    FTSE100 = "FTSE100"
    HANGSENG = "HANGSENG"
    NASDAQ = "NASDAQ"
    NIKKEI225 = "NIKKEI225"
    SENSEX = "SENSEX"
    SP500 = "SP500"


class ScoreMode(str, Enum):
    STANDARD = "STANDARD"
    HIGH_CONF = "HIGH_CONF"


Status = Literal["BUY", "HOLD", "SELL"]
Side = Literal["BUY", "SELL"]
StrategyKey = Literal["status_flip", "strength_70", "strength_80", "entry_70", "entry_80"]
Horizon = Literal["d7", "d30", "untilNext"]
