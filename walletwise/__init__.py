"""WalletWise: UPI payment tracking and spending assistant."""

__version__ = "0.1.0"
