"""Wallet address value object - shared by Reservation and Marketplace contexts"""

from src.platform.exception.exceptions import DomainError


MAX_WALLET_ADDRESS_LENGTH = 128


def normalize_wallet_address(value: str | None, *, field: str = 'address') -> str:
    """Hex wallet addresses compare case-insensitively; store them lower-cased."""
    address = (value or '').strip().lower()
    if not address:
        raise DomainError(f'{field} is required')
    if len(address) > MAX_WALLET_ADDRESS_LENGTH:
        raise DomainError(f'{field} is too long')
    return address
