"""Employee id generation and reservation."""

import threading
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from tms_backend.core.constants import RoleName
from tms_backend.core.exceptions import BadRequestError, UnsupportedRoleError
from tms_backend.db.base import Base
from tms_backend.models import EidSequence, Role, User
from tms_backend.services.eid_service import EidService, eid_service, parse_eid_number

from conftest import TEST_PASSWORD_HASH


def _user_with_eid(db, eid):
    role = Role(name=f"R-{eid}", is_active=True)
    db.add(role)
    db.flush()
    db.add(User(
        eid=eid,
        first_name="Existing",
        last_name="User",
        email=f"user-{role.id}@example.com",
        password_hash=TEST_PASSWORD_HASH,
        role_id=role.id,
    ))
    db.commit()


@pytest.fixture
def file_engine(tmp_path):
    """SQLite file shared by several connections; each transaction takes the write lock up front."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'eid.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()
def test_first_ids_are_sequential(db):
    assert eid_service.generate(db, "TRAINER") == "TR000001"
    assert eid_service.generate(db, "TRAINER") == "TR000002"


def test_each_role_has_its_own_prefix(db):
    assert eid_service.generate(db, RoleName.ADMINISTRATOR.value) == "AD000001"
    assert eid_service.generate(db, RoleName.DEPARTMENT_HEAD.value) == "DH000001"
    assert eid_service.generate(db, RoleName.SQA_AUDITOR.value) == "QA000001"
    assert eid_service.generate(db, RoleName.TRAINEE.value) == "TE000001"
    assert eid_service.generate(db, RoleName.ACADEMIC_DEPARTMENT.value) == "AC000001"


def test_range_continues_after_greatest_existing_eid(db):
    _user_with_eid(db, "TR000010")
    _user_with_eid(db, "TR000003")
    assert eid_service.generate(db, "TRAINER", count=3) == ["TR000011", "TR000012", "TR000013"]
    assert eid_service.generate(db, "TRAINER") == "TR000014"


def test_count_one_returns_a_list(db):
    assert eid_service.generate(db, "TRAINEE", count=1) == ["TE000001"]


def test_reserved_ids_are_not_handed_out_again(db):
    eid_service.generate(db, "TRAINER", count=5)
    sequence = db.get(EidSequence, "TR")
    assert sequence.next_value == 6
    assert eid_service.generate(db, "TRAINER") == "TR000006"


def test_concurrent_calls_never_collide(file_engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    barrier = threading.Barrier(2)
    results, errors = [], []

    def worker():
        session = Session()
        try:
            barrier.wait(timeout=10)
            results.append(eid_service.generate(session, "TRAINEE"))
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert sorted(results) == ["TE000001", "TE000002"]


def test_sequence_row_is_locked_before_existing_ids_are_read(db):
    calls = MagicMock()
    with patch.object(
        EidService, "_lock_sequence", wraps=EidService._lock_sequence
    ) as lock, patch.object(
        EidService, "_next_from_users", wraps=EidService._next_from_users
    ) as read:
        calls.attach_mock(lock, "lock")
        calls.attach_mock(read, "read")
        eid_service.generate(db, "TRAINER")

    assert [name for name, _, _ in calls.mock_calls] == ["lock", "read"]


def test_unparsable_suffix_restarts_at_one(db):
    _user_with_eid(db, "TRXYZ")
    assert eid_service.generate(db, "TRAINER") == "TR000001"


def test_non_ascii_digit_suffix_restarts_at_one(db):
    _user_with_eid(db, "TR²")
    assert eid_service.generate(db, "TRAINER") == "TR000001"


def test_unknown_role_is_rejected(db):
    with pytest.raises(UnsupportedRoleError) as exc:
        eid_service.generate(db, "JANITOR")
    assert exc.value.status_code == 400


@pytest.mark.parametrize("count", [0, -3])
def test_count_below_one_is_rejected(db, count):
    with pytest.raises(BadRequestError):
        eid_service.generate(db, "TRAINER", count=count)


def test_matches_role():
    assert eid_service.matches_role("TR000001", "TRAINER")
    assert not eid_service.matches_role("TE000001", "TRAINER")
    assert not eid_service.matches_role("TR000001", "JANITOR")


def test_parse_eid_number():
    assert parse_eid_number("QA000042", "QA") == 42
    assert parse_eid_number("QA00X042", "QA") is None
    assert parse_eid_number(None, "QA") is None
    assert parse_eid_number("TR²", "TR") is None
    assert parse_eid_number("TR٤٢", "TR") is None
    assert parse_eid_number("TR", "TR") is None
