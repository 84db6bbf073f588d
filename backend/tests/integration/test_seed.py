"""Integration tests for demo data seeding"""

from sealflow.models import Seal, User
from sealflow.seed import seed_demo_data


def test_seed_creates_users_and_seals(db_session, clock):
    created = seed_demo_data(db_session, clock)

    assert created == {"users": 3, "seals": 4}
    assert {u.username for u in db_session.query(User).all()} == {"admin", "test_user", "manager"}
    assert db_session.query(Seal).filter(Seal.status == "IN_USE").count() == 4

    contract = db_session.query(Seal).filter(Seal.name == "合同专用章").one()
    assert contract.shape == "SQUARE"
    assert contract.keeper == "法务部经理"


def test_seed_is_idempotent(db_session, clock):
    seed_demo_data(db_session, clock)
    assert seed_demo_data(db_session, clock) == {"users": 0, "seals": 0}
    assert db_session.query(User).count() == 3


def test_seeded_users_never_expose_password(client, db_session, clock):
    seed_demo_data(db_session, clock)
    data = client.get("/api/users/admin").json()["data"]
    assert data["role"] == "ADMIN"
    assert "password" not in data
