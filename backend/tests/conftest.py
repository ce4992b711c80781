import sys
from pathlib import Path

# Add backend directory to Python path FIRST
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Now import after path is set
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from models import Base

from config.dto_config import DtoSettings
from dtos.internal.schema_descriptors import EntityDescriptor, EntityFieldDescriptor, Requester
from exceptions import EntitlementError
from repositories.module_dto_repository import ModuleDtoRepository
from services.analytics_tracker import AnalyticsTracker
from services.interfaces import IAnalyticsSink, IEntitlementGate
from services.module_dto_service import ModuleDtoService
from services.shape_oracle import DefaultDtoShapeOracle

RESOURCE_ID = "resource-1"
MODULE_ID = "module-1"


@pytest.fixture
def db_session():
    """Create in-memory database for testing"""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


class FakeEntitlementGate(IEntitlementGate):
    """Entitlement gate whose answer tests can flip"""

    def __init__(self, entitled: bool = True, plan: str = "Pro"):
        self.entitled = entitled
        self.plan = plan
        self.checked = []

    def check_custom_actions_entitlement(self, workspace_id):
        self.checked.append(workspace_id)
        if not self.entitled:
            raise EntitlementError(workspace_id)

    def get_subscription_plan(self, workspace_id):
        return self.plan


class RecordingAnalyticsSink(IAnalyticsSink):
    def __init__(self):
        self.events = []

    def track(self, event, properties):
        self.events.append((event, properties))

    def names(self):
        return [event for event, _ in self.events]


class FailingAnalyticsSink(IAnalyticsSink):
    def track(self, event, properties):
        raise RuntimeError("analytics backend down")


@pytest.fixture
def enabled_settings():
    return DtoSettings(custom_actions_enabled=True)


@pytest.fixture
def disabled_settings():
    return DtoSettings(custom_actions_enabled=False)


@pytest.fixture
def entitlement_gate():
    return FakeEntitlementGate()


@pytest.fixture
def analytics_sink():
    return RecordingAnalyticsSink()


@pytest.fixture
def repository(db_session):
    return ModuleDtoRepository(db_session)


@pytest.fixture
def requester():
    return Requester(user_id="user-1", workspace_id="workspace-1")


@pytest.fixture
def make_service(db_session, entitlement_gate, analytics_sink):
    """Build a ModuleDtoService with the given settings (enabled by default)"""
    def _make(settings=None, gate=None, sink=None):
        gate = gate or entitlement_gate
        return ModuleDtoService(
            db_session,
            settings or DtoSettings(custom_actions_enabled=True),
            gate,
            AnalyticsTracker(sink or analytics_sink, gate),
        )
    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def shape_oracle():
    return DefaultDtoShapeOracle()


@pytest.fixture
def customer():
    return EntityDescriptor(
        id="entity-customer",
        name="Customer",
        display_name="Customer",
        plural_display_name="Customers",
        resource_id=RESOURCE_ID,
    )


@pytest.fixture
def order():
    return EntityDescriptor(
        id="entity-order",
        name="Order",
        display_name="Order",
        plural_display_name="Orders",
        resource_id=RESOURCE_ID,
    )


@pytest.fixture
def orders_field(order):
    """Customer.orders: many-to-one lookup from Customer to Order"""
    return EntityFieldDescriptor(
        id="field-orders",
        permanent_id="perm-orders",
        name="orders",
        display_name="Orders",
        data_type="Lookup",
        properties={
            "relatedEntityId": order.id,
            "allowMultipleSelection": True,
            "relatedFieldId": "perm-customer",
        },
    )


@pytest.fixture
def single_order_field(order):
    """Customer.lastOrder: single-valued lookup, no default DTOs"""
    return EntityFieldDescriptor(
        id="field-last-order",
        permanent_id="perm-last-order",
        name="lastOrder",
        display_name="Last Order",
        data_type="Lookup",
        properties={
            "relatedEntityId": order.id,
            "allowMultipleSelection": False,
        },
    )


@pytest.fixture
def status_field():
    return EntityFieldDescriptor(
        id="field-status",
        permanent_id="perm-status",
        name="status",
        display_name="Status",
        data_type="OptionSet",
        properties={"options": [{"label": "Active", "value": "active"}]},
    )
