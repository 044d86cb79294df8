from .repository import Repository as Repository
from .transaction import Transaction as Transaction
