"""Ticker price and benchmark index history.

Ticker, symbol and date are plaintext because they key the compound
unique indexes; prices are encrypted. Writes are upserts so a day can be
refreshed any number of times.
"""

from datetime import date
from typing import Optional

from sqlalchemy import select

from finvault.codec import Codec, Number
from finvault.database.mappers import benchmark_point_to_domain, price_point_to_domain
from finvault.database.models import BenchmarkHistory as ORMBenchmarkHistory
from finvault.database.models import PriceHistory as ORMPriceHistory
from finvault.database.repository import RecordRepository
from finvault.domain.entities import BenchmarkPoint, PricePoint
from finvault.logging_config import get_logger

logger = get_logger(__name__)


class PriceHistoryStore:
    """Store for daily ticker prices and benchmark prices."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def upsert_price(self, ticker: str, price: Number, day: date, source: str = "manual") -> None:
        with self.repository.transaction() as session:
            self.repository.upsert(
                session,
                ORMPriceHistory,
                {
                    "ticker": ticker.upper(),
                    "date": day,
                    "price": self.codec.encrypt_number(price),
                    "source": source,
                },
                index_elements=("ticker", "date"),
                update_columns=("price", "source"),
            )
        logger.debug("Stored %s price for %s", ticker.upper(), day)

    def get_price_history(
        self,
        ticker: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[PricePoint]:
        """Price points for a ticker in [start, end], ascending by date."""
        stmt = select(ORMPriceHistory).where(ORMPriceHistory.ticker == ticker.upper())
        if start is not None:
            stmt = stmt.where(ORMPriceHistory.date >= start)
        if end is not None:
            stmt = stmt.where(ORMPriceHistory.date <= end)
        stmt = stmt.order_by(ORMPriceHistory.date)
        with self.repository.session() as session:
            return [price_point_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def upsert_benchmark_price(self, symbol: str, price: Number, day: date) -> None:
        with self.repository.transaction() as session:
            self.repository.upsert(
                session,
                ORMBenchmarkHistory,
                {"symbol": symbol.upper(), "date": day, "price": self.codec.encrypt_number(price)},
                index_elements=("symbol", "date"),
                update_columns=("price",),
            )
        logger.debug("Stored %s benchmark price for %s", symbol.upper(), day)

    def get_benchmark_history(
        self,
        symbol: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[BenchmarkPoint]:
        """Benchmark points for a symbol in [start, end], ascending by date."""
        stmt = select(ORMBenchmarkHistory).where(ORMBenchmarkHistory.symbol == symbol.upper())
        if start is not None:
            stmt = stmt.where(ORMBenchmarkHistory.date >= start)
        if end is not None:
            stmt = stmt.where(ORMBenchmarkHistory.date <= end)
        stmt = stmt.order_by(ORMBenchmarkHistory.date)
        with self.repository.session() as session:
            return [benchmark_point_to_domain(self.codec, row) for row in session.scalars(stmt)]
