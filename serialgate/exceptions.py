class SerialGateError(Exception):
    pass


class ConstructionError(SerialGateError, ValueError):
    pass


class InvalidAmountError(SerialGateError, ValueError):
    pass


class TransactionFailure(SerialGateError):
    def __init__(self, label: str, message: str | None = None) -> None:
        self.label = label

        if message is None:
            message = f"Transaction {label} failed"

        super().__init__(message)
