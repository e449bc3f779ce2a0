"""Bill store plus due date generation for recurring bills."""

from datetime import date, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import delete, select
from sqlalchemy.exc import NoResultFound

from finvault.codec import Codec, Number
from finvault.database.mappers import (
    bill_payment_to_domain,
    bill_to_domain,
    encrypt_bill_for_create,
    encrypt_bill_for_update,
)
from finvault.database.models import Bill as ORMBill
from finvault.database.models import BillPayment as ORMBillPayment
from finvault.database.models import utcnow
from finvault.database.repository import RecordRepository
from finvault.domain.entities import Bill, BillFrequency, BillPayment, UpcomingBillInstance
from finvault.domain.errors import NotFoundError, bill_not_found
from finvault.domain.inputs import BillCreate, BillUpdate
from finvault.logging_config import get_logger
from finvault.utils.months import days_in_month

logger = get_logger(__name__)

QUARTER_START_MONTHS = (1, 4, 7, 10)


class BillStore:
    """Store for recurring bills and their per-due-date payments."""

    def __init__(self, repository: RecordRepository, codec: Codec):
        self.repository = repository
        self.codec = codec

    def create_bill(self, data: BillCreate) -> Bill:
        with self.repository.transaction() as session:
            row = ORMBill(**encrypt_bill_for_create(self.codec, data))
            session.add(row)
            session.flush()
            bill = bill_to_domain(self.codec, row)
        logger.debug("Created bill %s", bill.id)
        return bill

    def get_bill(self, bill_id: str) -> Optional[Bill]:
        with self.repository.session() as session:
            row = session.get(ORMBill, bill_id)
            if row is None:
                return None
            return bill_to_domain(self.codec, row)

    def list_bills(self, is_active: Optional[bool] = None) -> list[Bill]:
        stmt = select(ORMBill)
        if is_active is not None:
            stmt = stmt.where(ORMBill.is_active == is_active)
        stmt = stmt.order_by(ORMBill.due_day, ORMBill.created_at)
        with self.repository.session() as session:
            return [bill_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def update_bill(self, bill_id: str, data: BillUpdate) -> Optional[Bill]:
        try:
            with self.repository.transaction() as session:
                row = self.repository.update_by_id(
                    session, ORMBill, bill_id, encrypt_bill_for_update(self.codec, data)
                )
                bill = bill_to_domain(self.codec, row)
        except NoResultFound:
            return None
        return bill

    def delete_bill(self, bill_id: str) -> bool:
        """Delete a bill together with its payment records."""
        try:
            with self.repository.transaction() as session:
                self.repository.delete_by_id(session, ORMBill, bill_id)
        except NoResultFound:
            return False
        logger.debug("Deleted bill %s", bill_id)
        return True

    def mark_bill_paid(self, bill_id: str, due_date: date, amount: Number) -> BillPayment:
        """Record a payment for one due date.

        Marking the same due date again overwrites the amount and paid date,
        so paid/unpaid/paid cycles never hit the (bill_id, due_date) unique key.

        Raises:
            NotFoundError: If the bill does not exist
        """
        with self.repository.transaction() as session:
            if session.get(ORMBill, bill_id) is None:
                raise NotFoundError(bill_not_found(bill_id))
            self.repository.upsert(
                session,
                ORMBillPayment,
                {
                    "bill_id": bill_id,
                    "due_date": due_date,
                    "paid_date": utcnow(),
                    "amount": self.codec.encrypt_number(amount),
                },
                index_elements=("bill_id", "due_date"),
                update_columns=("paid_date", "amount"),
            )
            row = session.execute(
                select(ORMBillPayment)
                .where(ORMBillPayment.bill_id == bill_id, ORMBillPayment.due_date == due_date)
                .execution_options(populate_existing=True)
            ).scalar_one()
            payment = bill_payment_to_domain(self.codec, row)
        logger.debug("Marked bill %s paid for %s", bill_id, due_date)
        return payment

    def unmark_bill_paid(self, bill_id: str, due_date: date) -> bool:
        """Remove the payment for one due date. Returns False if there was none."""
        with self.repository.transaction() as session:
            result = session.execute(
                delete(ORMBillPayment).where(
                    ORMBillPayment.bill_id == bill_id,
                    ORMBillPayment.due_date == due_date,
                )
            )
            removed = result.rowcount > 0
        return removed

    def get_payments_in_range(self, start_date: date, end_date: date) -> list[BillPayment]:
        stmt = (
            select(ORMBillPayment)
            .where(ORMBillPayment.due_date >= start_date, ORMBillPayment.due_date <= end_date)
            .order_by(ORMBillPayment.due_date)
        )
        with self.repository.session() as session:
            return [bill_payment_to_domain(self.codec, row) for row in session.scalars(stmt)]

    def get_upcoming_instances(
        self, start_date: date, end_date: date, today: Optional[date] = None
    ) -> list[UpcomingBillInstance]:
        """Due dates of active bills in the range, with paid and overdue flags."""
        return compute_upcoming_instances(
            self.list_bills(is_active=True),
            self.get_payments_in_range(start_date, end_date),
            start_date,
            end_date,
            today or date.today(),
        )


def _clamped(year: int, month: int, day: int) -> date:
    """Date for day in the month, clamped to the month's last day."""
    return date(year, month, min(day, days_in_month(year, month)))


def _sunday_based_weekday(day: date) -> int:
    """Weekday number with Sunday as 0."""
    return (day.weekday() + 1) % 7


def generate_due_dates(bill: Bill, start_date: date, end_date: date) -> list[date]:
    """Generate the due dates of a bill within [start_date, end_date].

    Monthly and quarterly bills fall on due_day (clamped to the month
    length); quarterly bills only in January, April, July and October.
    Yearly bills fall on due_month/due_day, due_month defaulting to January.
    Weekly and biweekly bills fall on due_weekday (0 = Sunday) starting from
    the first such weekday on or after start_date.
    """
    dates: list[date] = []
    frequency = BillFrequency(bill.frequency)

    if frequency in (BillFrequency.MONTHLY, BillFrequency.QUARTERLY):
        cursor = start_date.replace(day=1)
        while cursor <= end_date:
            if frequency == BillFrequency.MONTHLY or cursor.month in QUARTER_START_MONTHS:
                due = _clamped(cursor.year, cursor.month, bill.due_day)
                if start_date <= due <= end_date:
                    dates.append(due)
            cursor += relativedelta(months=1)

    elif frequency == BillFrequency.YEARLY:
        month = bill.due_month or 1
        for year in range(start_date.year, end_date.year + 1):
            due = _clamped(year, month, bill.due_day)
            if start_date <= due <= end_date:
                dates.append(due)

    else:
        target = bill.due_weekday if bill.due_weekday is not None else 0
        step = timedelta(days=14 if frequency == BillFrequency.BIWEEKLY else 7)
        cursor = start_date + timedelta(days=(target - _sunday_based_weekday(start_date)) % 7)
        while cursor <= end_date:
            dates.append(cursor)
            cursor += step

    return dates


def compute_upcoming_instances(
    bills: Iterable[Bill],
    payments: Iterable[BillPayment],
    start_date: date,
    end_date: date,
    today: date,
) -> list[UpcomingBillInstance]:
    """Cross-reference generated due dates with payments.

    An unpaid instance due before today is overdue. Inactive bills are
    skipped. Results are sorted by due date.
    """
    payments_by_key = {(p.bill_id, p.due_date): p for p in payments}
    instances = []
    for bill in bills:
        if not bill.is_active:
            continue
        for due_date in generate_due_dates(bill, start_date, end_date):
            payment = payments_by_key.get((bill.id, due_date))
            instances.append(
                UpcomingBillInstance(
                    bill_id=bill.id,
                    bill_name=bill.name,
                    amount=bill.amount,
                    due_date=due_date,
                    is_paid=payment is not None,
                    is_overdue=payment is None and due_date < today,
                    category=bill.category,
                    payment_id=payment.id if payment is not None else None,
                )
            )
    instances.sort(key=lambda instance: instance.due_date)
    return instances
