class SignalAuditError(Exception):
    pass


class DataLoadError(SignalAuditError):
    def __init__(self, message: str, source: str) -> None:
        self.message = message
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        return f"Failed to load series from {self.source}: {self.message}"


class InsufficientHistoryError(SignalAuditError):
    def __init__(self, symbol: str, required: int, available: int) -> None:
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient history for {symbol}: required {required}, available {available}"
        )

    def __str__(self) -> str:
        return (
            f"{self.symbol} has insufficient history: "
            f"required {self.required} observations, available {self.available}"
        )


class UnknownStrategyError(SignalAuditError, ValueError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown strategy: {key}")

    def __str__(self) -> str:
        return f"Strategy '{self.key}' is not one of the supported backtest strategies"
