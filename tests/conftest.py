"""Pytest configuration and fixtures."""

import os
import tempfile

# Settings are read at import time, so point them somewhere harmless first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="seednode-test-uploads-"))

import hashlib  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from seednode.database import Base, enable_sqlite_pragmas, get_db  # noqa: E402
from seednode.errors import StoreUnavailableError  # noqa: E402
from seednode.models.track import Track  # noqa: E402, F401
from seednode.models.version import Version  # noqa: E402, F401
from seednode.services.content_store import ContentStore, StoreStats, get_content_store  # noqa: E402
from seednode.services.probe import get_duration_prober  # noqa: E402


class FakeContentStore(ContentStore):
    """In-memory content store that derives identifiers from a sha256 of the bytes."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.pins: set[str] = set()
        self.calls: list[str] = []
        self.unpinned: list[str] = []
        self.cat_requests: list[tuple[str, int | None, int | None]] = []
        self.closed: list[str] = []
        self.fail_add = False
        self.fail_pin = False
        self.fail_stats = False

    def put(self, data: bytes) -> str:
        content_id = "bafk" + hashlib.sha256(data).hexdigest()
        self.blobs[content_id] = data
        return content_id

    async def add(self, path: Path) -> str:
        self.calls.append("add")
        if self.fail_add:
            raise StoreUnavailableError("daemon unreachable")
        return self.put(Path(path).read_bytes())

    async def pin(self, content_id: str) -> None:
        self.calls.append("pin")
        if self.fail_pin:
            raise StoreUnavailableError("daemon unreachable")
        self.pins.add(content_id)

    async def unpin(self, content_id: str) -> bool:
        self.calls.append("unpin")
        self.unpinned.append(content_id)
        self.pins.discard(content_id)
        return True

    async def cat(self, content_id: str, offset: int | None = None, length: int | None = None):
        self.calls.append("cat")
        self.cat_requests.append((content_id, offset, length))
        if content_id not in self.blobs:
            raise StoreUnavailableError("no link named")
        data = self.blobs[content_id]
        start = offset or 0
        end = len(data) if length is None else start + length
        view = data[start:end]
        try:
            for i in range(0, len(view), 4096):
                yield view[i : i + 4096]
        finally:
            self.closed.append(content_id)

    async def stats(self) -> StoreStats:
        if self.fail_stats:
            raise StoreUnavailableError("daemon unreachable")
        return StoreStats(peer_id="12D3KooWTestPeer", version="kubo/0.29.0", peer_count=3)


class StubProber:
    """Duration prober returning a fixed answer."""

    def __init__(self, duration: float | None = 180.5) -> None:
        self.duration = duration
        self.probed: list[Path] = []

    async def probe(self, path: Path) -> float | None:
        self.probed.append(path)
        return self.duration


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_pragmas(engine)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="store")
def store_fixture() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture(name="prober")
def prober_fixture() -> StubProber:
    return StubProber()


@pytest.fixture(name="client")
def client_fixture(db_session: Session, store: FakeContentStore, prober: StubProber):
    """Create a test client with overridden DB and store dependencies and disabled rate limiting."""
    from main import app
    from seednode.rate_limit import limiter

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_content_store] = lambda: store
    app.dependency_overrides[get_duration_prober] = lambda: prober
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="upload_dir")
def upload_dir_fixture() -> Path:
    from seednode.config import get_settings

    path = Path(get_settings().UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


@pytest.fixture(name="make_track")
def make_track_fixture(client: TestClient):
    """Create a track through the API and return its JSON."""

    def _make(title: str = "Demo", artist_name: str = "Alice") -> dict:
        resp = client.post("/tracks", json={"title": title, "artistName": artist_name})
        assert resp.status_code == 201
        return resp.json()

    return _make
