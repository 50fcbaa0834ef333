# =============================================================================
# tests/test_authorization_service.py - Owner/Admin Check Tests
# =============================================================================

from decimal import Decimal

import pytest

from core.models.tables import Software
from core.services.authorization_service import AuthorizationService, find_user


@pytest.fixture
def listing(db_session, users):
    software = Software(
        title="Tool A",
        video_url="/uploads/v.mp4",
        zip_url="/uploads/z.zip",
        price=Decimal("9.99"),
        uploaded_by="alice",
    )
    db_session.add(software)
    db_session.commit()
    return software


@pytest.fixture
def authz(db_session):
    return AuthorizationService(db_session)


class TestIsOwner:
    """Tests for AuthorizationService.is_owner."""

    def test_uploader_is_owner(self, listing):
        assert AuthorizationService.is_owner(listing, "alice")

    def test_other_user_is_not_owner(self, listing):
        assert not AuthorizationService.is_owner(listing, "bob")

    def test_anonymous_is_not_owner(self, listing):
        assert not AuthorizationService.is_owner(listing, None)

    def test_unset_owner_matches_nobody(self):
        orphan = Software(title="x", video_url="v", zip_url="z", price=Decimal("1"))
        assert not AuthorizationService.is_owner(orphan, "alice")


class TestIsAdmin:
    """Tests for AuthorizationService.is_admin."""

    def test_admin_user(self, authz, users):
        assert authz.is_admin("root")

    def test_regular_user(self, authz, users):
        assert not authz.is_admin("alice")

    def test_unknown_user(self, authz, users):
        assert not authz.is_admin("mallory")

    def test_anonymous(self, authz, users):
        assert not authz.is_admin(None)


class TestCanModify:
    """Owner or admin may modify; anyone else may not."""

    @pytest.mark.parametrize(
        "identity, allowed",
        [("alice", True), ("root", True), ("bob", False), ("mallory", False), (None, False)],
    )
    def test_can_modify(self, authz, listing, identity, allowed):
        assert authz.can_modify(listing, identity) is allowed


def test_describe(authz, listing):
    report = authz.describe(listing, "root")

    assert report.software_id == listing.id
    assert report.software_title == "Tool A"
    assert report.uploaded_by == "alice"
    assert report.current_user == "root"
    assert report.is_owner is False
    assert report.is_admin is True
    assert report.can_edit is True


def test_find_user(db_session, users):
    assert find_user(db_session, "bob").username == "bob"
    assert find_user(db_session, "nobody") is None
    assert find_user(db_session, "") is None
