"""
Tests de integracion del ServerRepository: paginacion, filtros y consultas puntuales.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest
import pytest_asyncio

from subregistry.infrastructure.database.models import PackageMetadataModel, ServerModel
from subregistry.infrastructure.repositories.server_repository import ServerRepository
from subregistry.shared.constants.registry_constants import Visibility
from subregistry.shared.utils.cursor import decode_cursor


BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)

# (name, version, visibility, status, is_latest, published offset en dias)
SERVERS = [
    ("a/x", "1.0.0", "published", "active", False, 0),
    ("a/x", "2.0.0", "published", "active", True, 5),
    ("a/x", "1.5.0", "draft", "deprecated", False, 2),
    ("b/y", "0.1.0", "published", "active", True, 1),
    ("b/y", "0.0.9", "draft", "active", False, 0),
    ("c/z", "3.0.0", "published", "deleted", True, 3),
    ("d/w", "1.0.0", "published", "active", True, 4),
    ("e/v", "1.0.0", "draft", "active", True, 1),
]

# Visibilidad por paquete; d/w y e/v no tienen fila (cuentan como draft)
PACKAGES = {
    "a/x": "published",
    "b/y": "published",
    "c/z": "draft",
}


def _visible(name: str, visibility: Optional[str], row_visibility: str) -> bool:
    if visibility is None:
        return True
    return row_visibility == visibility and PACKAGES.get(name, "draft") == visibility


def _expected(visibility: Optional[str] = None, status: Optional[str] = None) -> List[Tuple[str, str]]:
    keys = [
        (name, version)
        for name, version, row_vis, row_status, _, _ in SERVERS
        if _visible(name, visibility, row_vis) and (status is None or row_status == status)
    ]
    return sorted(keys)


@pytest_asyncio.fixture
async def seeded_session(db_session):
    for name, version, visibility, status, is_latest, offset in SERVERS:
        db_session.add(
            ServerModel(
                name=name,
                version=version,
                description=f"{name} {version}",
                status=status,
                is_latest=is_latest,
                publisher_meta={},
                parent_registry_meta={},
                version_registry_meta={},
                visibility=visibility,
                published_at=BASE_TIME + timedelta(days=offset),
            )
        )
    for name, visibility in PACKAGES.items():
        db_session.add(PackageMetadataModel(name=name, registry_meta={}, visibility=visibility))
    await db_session.commit()
    return db_session


async def _walk(repo: ServerRepository, limit: int, **filters) -> List[Tuple[str, str]]:
    """Recorre todas las paginas siguiendo next_cursor."""
    keys: List[Tuple[str, str]] = []
    after = None
    for _ in range(len(SERVERS) + 2):
        page = await repo.list_page(limit=limit, after=after, **filters)
        assert len(page.rows) <= limit
        keys.extend((server.name, server.version) for server, _ in page.rows)
        if page.next_cursor is None:
            return keys
        after = decode_cursor(page.next_cursor)
    raise AssertionError("la paginacion no termino")


class TestListPage:
    """Paginacion por cursor (name, version)."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 2, 3, 7, 8, 100])
    @pytest.mark.parametrize("visibility", [None, "published", "draft"])
    async def test_pages_concatenate_to_full_scan(self, seeded_session, limit, visibility) -> None:
        repo = ServerRepository(seeded_session)

        keys = await _walk(repo, limit, visibility=visibility)

        assert keys == _expected(visibility)
        assert len(set(keys)) == len(keys)

    @pytest.mark.asyncio
    async def test_status_filter(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        keys = await _walk(repo, 2, status="active")

        assert keys == _expected(status="active")

    @pytest.mark.asyncio
    async def test_cursor_row_is_excluded(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        page = await repo.list_page(limit=100, after=("a/x", "1.5.0"))

        keys = [(s.name, s.version) for s, _ in page.rows]
        assert ("a/x", "1.5.0") not in keys
        assert keys[0] == ("a/x", "2.0.0")

    @pytest.mark.asyncio
    async def test_exact_limit_has_no_next_cursor(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        page = await repo.list_page(limit=len(SERVERS))

        assert len(page.rows) == len(SERVERS)
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_next_cursor_is_last_row(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        page = await repo.list_page(limit=2)

        assert page.next_cursor == "a/x:1.5.0"

    @pytest.mark.asyncio
    async def test_package_without_row_counts_as_draft(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        published = await _walk(repo, 100, visibility=Visibility.PUBLISHED)
        draft = await _walk(repo, 100, visibility=Visibility.DRAFT)

        assert ("d/w", "1.0.0") not in published
        assert ("e/v", "1.0.0") in draft

    @pytest.mark.asyncio
    async def test_rows_include_package_metadata(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        page = await repo.list_page(limit=100)

        packages = {server.name: pkg for server, pkg in page.rows}
        assert packages["a/x"].visibility == "published"
        assert packages["d/w"] is None


class TestPointLookups:
    """Consultas por nombre y version."""

    @pytest.mark.asyncio
    async def test_get_latest(self, seeded_session) -> None:
        server, pkg = await ServerRepository(seeded_session).get_latest("a/x")

        assert server.version == "2.0.0"
        assert pkg.name == "a/x"

    @pytest.mark.asyncio
    async def test_get_latest_missing(self, seeded_session) -> None:
        assert await ServerRepository(seeded_session).get_latest("no/existe") is None

    @pytest.mark.asyncio
    async def test_get_latest_prefers_most_recent_on_conflict(self, seeded_session) -> None:
        row = await seeded_session.get(ServerModel, ("a/x", "1.0.0"))
        row.is_latest = True
        await seeded_session.commit()

        server, _ = await ServerRepository(seeded_session).get_latest("a/x")

        assert server.version == "2.0.0"

    @pytest.mark.asyncio
    async def test_list_versions_most_recent_first(self, seeded_session) -> None:
        rows = await ServerRepository(seeded_session).list_versions("a/x")

        assert [s.version for s, _ in rows] == ["2.0.0", "1.5.0", "1.0.0"]

    @pytest.mark.asyncio
    async def test_list_versions_with_visibility(self, seeded_session) -> None:
        rows = await ServerRepository(seeded_session).list_versions("a/x", visibility="published")

        assert [s.version for s, _ in rows] == ["2.0.0", "1.0.0"]

    @pytest.mark.asyncio
    async def test_get_version(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        server, _ = await repo.get_version("b/y", "0.0.9")

        assert server.visibility == "draft"
        assert await repo.get_version("b/y", "9.9.9") is None


class TestLocalMutations:
    """Escrituras de la superficie de administracion."""

    @pytest.mark.asyncio
    async def test_set_version_registry_meta(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        server = await repo.set_version_registry_meta("a/x", "1.0.0", {"tier": "gold"})

        assert server.version_registry_meta == {"tier": "gold"}
        assert await repo.set_version_registry_meta("a/x", "9.9.9", {}) is None

    @pytest.mark.asyncio
    async def test_set_version_visibility(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)

        server = await repo.set_version_visibility("b/y", "0.0.9", Visibility.PUBLISHED)

        assert server.visibility == "published"
        assert await repo.set_version_visibility("b/y", "9.9.9", Visibility.DRAFT) is None

    @pytest.mark.asyncio
    async def test_find_names_with_multiple_latest(self, seeded_session) -> None:
        repo = ServerRepository(seeded_session)
        assert await repo.find_names_with_multiple_latest() == []

        row = await seeded_session.get(ServerModel, ("b/y", "0.0.9"))
        row.is_latest = True
        await seeded_session.commit()

        assert await repo.find_names_with_multiple_latest() == ["b/y"]
