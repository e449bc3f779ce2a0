"""Read-only analytics engines over the entity stores."""

from finvault.analytics.net_worth import NetWorthEngine
from finvault.analytics.portfolio import PortfolioEngine
from finvault.analytics.spending import SpendingEngine

__all__ = ["NetWorthEngine", "PortfolioEngine", "SpendingEngine"]
