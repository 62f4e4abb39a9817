from .contract import Escrow

__all__ = ["Escrow"]
