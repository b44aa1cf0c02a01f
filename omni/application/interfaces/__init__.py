"""Application interfaces (ports): repository protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from omni.infrastructure.
"""

from omni.application.interfaces.repositories import (
    IAccountRepository,
    ICategoryRepository,
    IProductRepository,
    ISessionRepository,
    IStockRepository,
)

__all__ = [
    "IAccountRepository",
    "ICategoryRepository",
    "IProductRepository",
    "ISessionRepository",
    "IStockRepository",
]
