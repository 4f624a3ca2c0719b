"""
Tests unitarios para metadata_composer.

Verifica la precedencia del overlay parent -> paquete -> version y la forma
del ServerJson servido.
"""
from __future__ import annotations

from datetime import datetime, timezone

from subregistry.application.services.metadata_composer import (
    compose_registry_meta,
    compose_server_json,
    overlay,
)
from subregistry.infrastructure.database.models import PackageMetadataModel, ServerModel


def _server(**overrides) -> ServerModel:
    values = dict(
        name="io.example/server",
        version="1.0.0",
        description="Servidor de ejemplo",
        status="active",
        is_latest=True,
        repository={"url": "https://github.com/example/server", "source": "github"},
        website_url=None,
        packages=None,
        remotes=[{"type": "sse", "url": "https://example.io/sse"}],
        publisher_meta={"io.example/publisher": {"build": "abc"}},
        parent_registry_meta={"tier": "parent", "official": True},
        version_registry_meta={},
        visibility="draft",
        published_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )
    values.update(overrides)
    return ServerModel(**values)


class TestOverlay:
    """Tests para overlay()."""

    def test_later_layers_win(self) -> None:
        result = overlay([{"a": 1, "b": 1}, {"b": 2, "c": 2}, {"c": 3}])

        assert result == {"a": 1, "b": 2, "c": 3}

    def test_none_layers_are_skipped(self) -> None:
        assert overlay([None, {"a": 1}, None]) == {"a": 1}

    def test_merge_is_shallow(self) -> None:
        """Un dict anidado de una capa posterior reemplaza al anterior completo."""
        result = overlay([{"nested": {"x": 1, "y": 1}}, {"nested": {"y": 2}}])

        assert result == {"nested": {"y": 2}}

    def test_inputs_are_not_mutated(self) -> None:
        base = {"a": 1}
        top = {"a": 2}

        result = overlay([base, top])
        result["a"] = 99

        assert base == {"a": 1}
        assert top == {"a": 2}


class TestComposeRegistryMeta:
    """Precedencia de las tres capas de metadata de registro."""

    def test_version_overrides_package_overrides_parent(self) -> None:
        server = _server(
            parent_registry_meta={"tier": "parent", "only_parent": 1},
            version_registry_meta={"tier": "version"},
        )
        package = PackageMetadataModel(
            name=server.name, registry_meta={"tier": "package", "only_package": 2}
        )

        meta = compose_registry_meta(server, package)

        assert meta == {"tier": "version", "only_parent": 1, "only_package": 2}

    def test_package_overrides_parent_when_version_empty(self) -> None:
        server = _server(parent_registry_meta={"tier": "parent"}, version_registry_meta={})
        package = PackageMetadataModel(name=server.name, registry_meta={"tier": "package"})

        assert compose_registry_meta(server, package) == {"tier": "package"}

    def test_missing_package_uses_parent_and_version(self) -> None:
        server = _server(
            parent_registry_meta={"tier": "parent"},
            version_registry_meta={"featured": True},
        )

        assert compose_registry_meta(server, None) == {"tier": "parent", "featured": True}


class TestComposeServerJson:
    """Forma del ServerJson."""

    def test_publisher_meta_passes_through_unmodified(self) -> None:
        server = _server(version_registry_meta={"io.example/publisher": "local"})

        body = compose_server_json(server, None)

        assert body["server"]["_meta"] == {"io.example/publisher": {"build": "abc"}}
        assert body["_meta"]["io.example/publisher"] == "local"

    def test_optional_fields_omitted_when_absent(self) -> None:
        server = _server(website_url=None, packages=None)

        body = compose_server_json(server)

        assert "websiteUrl" not in body["server"]
        assert "packages" not in body["server"]
        assert body["server"]["remotes"] == [{"type": "sse", "url": "https://example.io/sse"}]
        assert body["server"]["repository"]["source"] == "github"

    def test_identity_fields_present(self) -> None:
        body = compose_server_json(_server(website_url="https://example.io"))

        assert body["server"]["name"] == "io.example/server"
        assert body["server"]["version"] == "1.0.0"
        assert body["server"]["description"] == "Servidor de ejemplo"
        assert body["server"]["websiteUrl"] == "https://example.io"

    def test_empty_packages_list_is_kept(self) -> None:
        body = compose_server_json(_server(packages=[]))

        assert body["server"]["packages"] == []
