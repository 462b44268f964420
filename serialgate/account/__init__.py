from .models import TransactionResult as TransactionResult
from .shared_account import SharedAccount as SharedAccount
