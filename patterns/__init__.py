from .rate_gate import RateGate
from .password_builder import PasswordBuilder, generate_password
from .observer import VaultSubject, AlertObserver
from .chain_of_responsibility import check_admission

__all__ = [
    'RateGate', 'PasswordBuilder', 'generate_password',
    'VaultSubject', 'AlertObserver', 'check_admission'
]
