from .contract import EV_ESCROW_DEPLOYED, EscrowFactory

__all__ = ["EscrowFactory", "EV_ESCROW_DEPLOYED"]
