"""
Pytest fixtures for the aid order consolidation test suite.

Provides:
- Structured logging capture
- SQLite-backed engine/session fixtures (one database file per test)
- Row builders for articles, allocations and order entries
"""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from aid_kernel.db.engine import (
    create_tables,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from aid_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from aid_kernel.models import (
    Article,
    District,
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    ItemType,
    OrderEntry,
    OrderStatus,
    PublicBeneficiaryEntry,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture aid_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            aggregate_demand(...)
            logs = captured_logs()
            assert any(r["message"] == "demand_aggregated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    handler.setLevel(logging.DEBUG)
    root = logging.getLogger("aid_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    """A file-backed SQLite database with every table created.

    File-backed rather than in-memory so that worker threads opened by the
    async service see the same data.
    """
    engine = init_engine_from_url(f"sqlite:///{tmp_path / 'aid.db'}")
    create_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """A session for seeding and selector tests.  Builders commit."""
    sess = get_session()
    try:
        yield sess
    finally:
        sess.close()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory()


# =============================================================================
# Row builders
# =============================================================================


class StoreBuilder:
    """Inserts catalog, allocation and order rows; every call commits."""

    def __init__(self, session: Session):
        self.session = session
        self._district: District | None = None

    def _save(self, row):
        self.session.add(row)
        self.session.commit()
        return row

    def article(
        self,
        name: str,
        cost: str = "100.00",
        item_type: ItemType = ItemType.ARTICLE,
        **kwargs,
    ) -> Article:
        return self._save(
            Article(
                article_name=name,
                cost_per_unit=Decimal(cost),
                item_type=item_type.value,
                **kwargs,
            )
        )

    def district(self, name: str = "Chennai") -> District:
        if self._district is None:
            self._district = self._save(
                District(district_name=name, allotted_budget=Decimal("100000.00"))
            )
        return self._district

    def district_entry(
        self,
        article_id: UUID,
        quantity: int,
        total_amount: str,
        application_number: str | None = "D 001",
        **kwargs,
    ) -> DistrictBeneficiaryEntry:
        return self._save(
            DistrictBeneficiaryEntry(
                district_id=self.district().id,
                application_number=application_number,
                article_id=article_id,
                quantity=quantity,
                total_amount=Decimal(total_amount),
                **kwargs,
            )
        )

    def public_entry(
        self,
        article_id: UUID,
        quantity: int,
        total_amount: str,
        application_number: str | None = "P 001",
        **kwargs,
    ) -> PublicBeneficiaryEntry:
        kwargs.setdefault("name", "Beneficiary")
        kwargs.setdefault("aadhar_number", "123412341234")
        return self._save(
            PublicBeneficiaryEntry(
                application_number=application_number,
                article_id=article_id,
                quantity=quantity,
                total_amount=Decimal(total_amount),
                **kwargs,
            )
        )

    def institution_entry(
        self,
        article_id: UUID,
        quantity: int,
        total_amount: str,
        application_number: str | None = "I 001",
        **kwargs,
    ) -> InstitutionBeneficiaryEntry:
        kwargs.setdefault("institution_name", "Government School")
        return self._save(
            InstitutionBeneficiaryEntry(
                application_number=application_number,
                article_id=article_id,
                quantity=quantity,
                total_amount=Decimal(total_amount),
                **kwargs,
            )
        )

    def order(
        self,
        article_id: UUID,
        quantity_ordered: int,
        status: OrderStatus = OrderStatus.ORDERED,
        total_amount: str = "0",
        order_date: date | None = None,
        **kwargs,
    ) -> OrderEntry:
        return self._save(
            OrderEntry(
                article_id=article_id,
                quantity_ordered=quantity_ordered,
                status=status.value,
                total_amount=Decimal(total_amount),
                order_date=order_date or date(2026, 1, 15),
                **kwargs,
            )
        )


@pytest.fixture
def store(session) -> StoreBuilder:
    return StoreBuilder(session)

