"""
Tests for the closed entity registry and error taxonomy.
"""

from types import MappingProxyType

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from lifecycle_toolkit.catalog import CATALOG, build_default_registry, create_session_factory
from lifecycle_toolkit.soft_delete import (
    ConflictError,
    EntityRegistry,
    NotFoundError,
    RegistryEntry,
    SoftDeletableAccessor,
    UnknownEntityError,
    ValidationError,
    get_registry,
    install_registry,
)
from lifecycle_toolkit.soft_delete import registry as registry_module


class NullAccessor(SoftDeletableAccessor):
    async def count_deleted(self):
        return 0

    async def find_deleted(self, offset, limit):
        return []

    async def restore(self, entity_id):
        raise NotFoundError("null", entity_id)

    async def permanent_delete(self, entity_id):
        raise NotFoundError("null", entity_id, state="existing")

    async def soft_delete(self, entity_id, actor):
        raise NotFoundError("null", entity_id, state="existing")


@pytest.fixture
def clean_registry(monkeypatch):
    monkeypatch.setattr(registry_module, "_registry", None)


@pytest.fixture
def db_session_factory():
    return create_session_factory(create_async_engine("sqlite+aiosqlite:///:memory:"))


class TestEntityRegistry:
    """Test registry construction and lookup."""

    def test_resolve_registered(self):
        accessor = NullAccessor()
        registry = EntityRegistry([RegistryEntry("products", accessor)])

        assert registry.resolve("products") is accessor
        assert "products" in registry
        assert len(registry) == 1
        assert list(registry) == ["products"]

    def test_mapping_constructor(self):
        registry = EntityRegistry({"users": NullAccessor(), "brands": NullAccessor()})
        assert registry.names() == ("users", "brands")

    @pytest.mark.parametrize("name", ["orders", "PRODUCTS", "", 42, None, "keys"])
    def test_unknown_names(self, name):
        registry = EntityRegistry({"products": NullAccessor()})

        with pytest.raises(UnknownEntityError) as exc:
            registry.resolve(name)

        assert exc.value.kind == "unknown_entity"
        assert name not in registry

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError, match="registered twice"):
            EntityRegistry(
                [RegistryEntry("users", NullAccessor()), RegistryEntry("users", NullAccessor())]
            )

    @pytest.mark.parametrize("name", ["Products", "1users", "blog categories", "", "a" * 65])
    def test_malformed_names_rejected(self, name):
        with pytest.raises(ValueError):
            RegistryEntry(name, NullAccessor())

    def test_registry_cannot_be_mutated(self):
        source = {"products": NullAccessor()}
        registry = EntityRegistry(source)
        source["orders"] = NullAccessor()

        assert "orders" not in registry
        assert isinstance(registry._accessors, MappingProxyType)
        with pytest.raises(TypeError):
            registry._accessors["orders"] = NullAccessor()

    def test_default_registry_covers_catalog(self, db_session_factory):
        registry = build_default_registry(db_session_factory)

        assert set(registry.names()) == set(CATALOG)
        assert registry.resolve("blogcategories").entity_type == "blogcategories"


class TestProcessRegistry:
    """Test the process-wide registry installed at startup."""

    def test_get_before_install(self, clean_registry):
        with pytest.raises(RuntimeError):
            get_registry()

    def test_install_once(self, clean_registry):
        registry = EntityRegistry({"products": NullAccessor()})

        assert install_registry(registry) is registry
        assert get_registry() is registry
        # Reinstalling the same registry is harmless
        assert install_registry(registry) is registry

    def test_replacement_rejected(self, clean_registry):
        install_registry(EntityRegistry({"products": NullAccessor()}))

        with pytest.raises(RuntimeError):
            install_registry(EntityRegistry({"users": NullAccessor()}))


class TestErrorTaxonomy:
    """Test the error kinds callers map on."""

    def test_validation_error_details(self):
        error = ValidationError("ids", "at least one ID is required", "products")

        assert error.field == "ids"
        assert error.to_dict() == {
            "kind": "validation_error",
            "message": "Invalid ids: at least one ID is required",
            "entity_type": "products",
            "entity_id": None,
            "details": {"ids": "at least one ID is required"},
        }

    def test_not_found_and_conflict_carry_ids(self):
        not_found = NotFoundError("users", "a" * 24)
        conflict = ConflictError("users", "b" * 24)

        assert not_found.entity_id == "a" * 24
        assert conflict.entity_id == "b" * 24
        assert {not_found.kind, conflict.kind} == {"not_found", "conflict"}
