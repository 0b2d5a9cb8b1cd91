"""
Tests unitaires LOT 3: Identity et tables de rôles
"""

import pytest

from cafe_client.auth import (
    ROLE_DESCRIPTIONS,
    ROLE_PERMISSIONS,
    AuditLogPage,
    Identity,
    Permission,
    UserRole,
    parse_role,
    permission_tag,
)


class TestParseRole:
    def test_case_and_whitespace(self) -> None:
        assert parse_role(" Manager ") is UserRole.MANAGER

    def test_enum_passthrough(self) -> None:
        assert parse_role(UserRole.KITCHEN) is UserRole.KITCHEN

    def test_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown role"):
            parse_role("wizard")

    def test_permission_tag(self) -> None:
        assert permission_tag(Permission.VIEW_MENU) == "view_menu"
        assert permission_tag("custom_flag") == "custom_flag"


class TestRoleTables:
    def test_every_role_described_and_mapped(self) -> None:
        assert set(ROLE_PERMISSIONS) == set(UserRole)
        assert set(ROLE_DESCRIPTIONS) == set(UserRole)

    def test_customer_only_views_menu(self) -> None:
        assert ROLE_PERMISSIONS[UserRole.CUSTOMER] == [Permission.VIEW_MENU]


class TestIdentity:
    def test_from_camel_case(self, user_factory) -> None:
        identity = Identity.from_dict(user_factory("barista", isMFAEnabled=True, lastLoginAt="2024-02-01"))

        assert identity.id == "7"
        assert identity.role is UserRole.BARISTA
        assert identity.full_name == "Alice Martin"
        assert identity.is_mfa_enabled is True
        assert identity.last_login_at == "2024-02-01"
        assert identity.verified is True

    def test_from_snake_case(self) -> None:
        identity = Identity.from_dict(
            {"id": 3, "role": "cashier", "first_name": "Bob", "is_active": False, "date_joined": "2023-05-05"}
        )

        assert identity.id == "3"
        assert identity.first_name == "Bob"
        assert identity.is_active is False
        assert identity.created_at == "2023-05-05"

    @pytest.mark.parametrize("data", [{"role": "owner"}, {"id": "1"}, {"id": "1", "role": "wizard"}, "owner"])
    def test_invalid(self, data) -> None:
        with pytest.raises(ValueError):
            Identity.from_dict(data)

    def test_round_trip_keeps_permissions_and_flag(self) -> None:
        original = Identity(id="1", role=UserRole.MANAGER, permissions=["view_menu"], verified=False)

        restored = Identity.from_dict(original.to_dict())

        assert restored.permissions == ["view_menu"]
        assert restored.verified is False

    def test_placeholder(self) -> None:
        identity = Identity.placeholder(None)

        assert identity.id == "me"
        assert identity.role is UserRole.CUSTOMER
        assert identity.effective_permissions == ["view_menu"]
        assert identity.verified is False


class TestAuditLogPage:
    def test_snake_case_total_pages(self) -> None:
        page = AuditLogPage.from_dict({"logs": None, "total": "3", "total_pages": 2})

        assert page.logs == []
        assert page.total == 3
        assert page.total_pages == 2
