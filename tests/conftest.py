import itertools
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from primecare.main import app
from primecare.api.deps import get_scheduler, get_transport
from primecare.core.database import Base, enable_sqlite_foreign_keys, get_db
from primecare.core.timeutils import utcnow
from primecare.models import MachineModel, Machine, Sale, ServiceRequest, ServiceVisit, ServiceStatus
from primecare.services.mail_transport import MockMailTransport
from primecare.services.scheduler import CronScheduler

# 11:30 in Asia/Kolkata, well away from a local midnight
FIXED_NOW = datetime(2026, 3, 10, 6, 0, 0)


@pytest.fixture(scope="function")
def test_engine():
    """In-memory SQLite shared across threads"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Create a fresh database session for each test"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def mail_transport():
    return MockMailTransport()


@pytest.fixture
def scheduler(session_factory, mail_transport):
    cron = CronScheduler(session_factory=session_factory, transport_factory=lambda: mail_transport)
    yield cron
    cron.shutdown()


@pytest.fixture(scope="function")
def client(test_db, mail_transport, scheduler):
    """Create test client with database, mail and scheduler overrides"""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transport] = lambda: mail_transport
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def cron_secret(monkeypatch):
    from primecare.core.config import settings
    monkeypatch.setattr(settings, "CRON_SECRET", "test-cron-secret")
    return "test-cron-secret"


@pytest.fixture
def no_cron_secret(monkeypatch):
    from primecare.core.config import settings
    monkeypatch.setattr(settings, "CRON_SECRET", None)


@pytest.fixture
def make_machine(test_db):
    """
    Create a machine, optionally sold.

    `sold_days_ago` is measured from `now` (default: the real clock) so a
    90-day interval puts service due in `90 - sold_days_ago` days.
    """
    serials = itertools.count(1)

    def _make(
        sold_days_ago=None,
        now=None,
        warranty_months=12,
        customer_email="customer@example.com",
        customer_name="Acme Traders",
        opt_out=False,
        serial_number=None,
        model_name="JKET Prime 400",
    ):
        model = MachineModel(name=model_name, warranty_period_months=warranty_months)
        test_db.add(model)
        test_db.flush()

        machine = Machine(
            serial_number=serial_number or f"JKET-{next(serials):05d}",
            machine_model_id=model.id,
        )
        test_db.add(machine)
        test_db.flush()

        if sold_days_ago is not None:
            test_db.add(Sale(
                machine_id=machine.id,
                sale_date=(now or utcnow()) - timedelta(days=sold_days_ago),
                customer_name=customer_name,
                customer_email=customer_email,
                reminder_opt_out=opt_out,
            ))

        test_db.commit()
        test_db.refresh(machine)
        return machine

    return _make


@pytest.fixture
def add_visit(test_db):
    """Attach a service request and visit to a machine"""
    def _add(machine, visit_date, status=ServiceStatus.COMPLETED, total_cost=0.0, created_at=None):
        request = ServiceRequest(
            machine_id=machine.id,
            complaint="Routine service",
            status=status,
            created_at=created_at or visit_date,
        )
        test_db.add(request)
        test_db.flush()
        test_db.add(ServiceVisit(
            service_request_id=request.id,
            service_visit_date=visit_date,
            status=status,
            total_cost=total_cost,
            engineer_name="R. Kumar",
        ))
        test_db.commit()
        test_db.expire(machine)
        return request

    return _add
