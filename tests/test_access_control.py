"""
Tests for the principal passed in from the access-control layer.
"""

import pytest

from lifecycle_toolkit.access_control import Principal


class TestPrincipal:
    def test_stamp(self):
        principal = Principal(id="u1", email="ops@example.com")

        assert principal.role == "admin"
        assert principal.to_stamp() == {"id": "u1", "email": "ops@example.com"}

    @pytest.mark.parametrize("principal_id", ["", "   "])
    def test_id_required(self, principal_id):
        with pytest.raises(ValueError):
            Principal(id=principal_id, email="ops@example.com")

    def test_from_mapping(self):
        principal = Principal.from_mapping(
            {"_id": "65f1c0de0000000000000001", "email": "ops@example.com", "role": "admin"}
        )

        assert principal.id == "65f1c0de0000000000000001"
        assert principal.email == "ops@example.com"

    def test_from_mapping_without_id(self):
        with pytest.raises(ValueError):
            Principal.from_mapping({"email": "ops@example.com"})

    def test_immutable(self):
        principal = Principal(id="u1", email="ops@example.com")
        with pytest.raises(AttributeError):
            principal.id = "u2"
