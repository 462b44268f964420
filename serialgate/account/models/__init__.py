from .transaction_result import TransactionResult as TransactionResult
