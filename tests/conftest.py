"""Test fixtures for hrdesk."""
from datetime import date

import pytest
from sqlalchemy.orm import sessionmaker

from hrdesk.config import Settings, get_settings
from hrdesk.core.clock import fixed_clock
from hrdesk.core.database import dispose_engines, make_engine
from hrdesk.core.models import Base
from hrdesk.services import LeaveService, OvertimeService

# Monday
TODAY = date(2024, 6, 3)
EMPLOYEE = 7


@pytest.fixture(autouse=True)
def _fresh_globals():
    """Drop cached settings and engines so tests never share a database."""

    get_settings.cache_clear()
    yield
    dispose_engines()
    get_settings.cache_clear()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'hrdesk.db'}"


@pytest.fixture
def settings(db_url) -> Settings:
    return Settings(database_url=db_url)


@pytest.fixture
def session_factory(db_url):
    """A sessionmaker bound to a throwaway SQLite file with the schema created."""

    engine = make_engine(db_url)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def leave_service(session_factory, settings) -> LeaveService:
    svc = LeaveService(session_factory, settings, fixed_clock(TODAY))
    svc.setup_leave_types()
    return svc


@pytest.fixture
def overtime_service(session_factory, settings) -> OvertimeService:
    return OvertimeService(session_factory, settings, fixed_clock(TODAY))


@pytest.fixture
def leave_type_ids(leave_service) -> dict[str, int]:
    return {lt.name: lt.id for lt in leave_service.leave_types()}


@pytest.fixture
def funded_employee(leave_service) -> int:
    """Employee with the default 15-day balances for every type in 2024."""

    leave_service.initialize_balances(EMPLOYEE, 2024)
    return EMPLOYEE
