from datetime import datetime

from campaign_app.models import Organization, User, UserOrganization, db


def test_organization_to_dict(test_organization):
    payload = test_organization.to_dict()

    assert payload["id"] == test_organization.id
    assert payload["name"] == "Test Organization"
    datetime.fromisoformat(payload["created_at"])
    datetime.fromisoformat(payload["updated_at"])


def test_user_lookup_by_email(existing_user):
    assert User.find_by_email("existing@example.com").id == existing_user.id
    assert User.find_by_email("missing@example.com") is None


def test_user_organization_links(existing_user, test_organization):
    db.session.add(UserOrganization(user_id=existing_user.id, organization_id=test_organization.id, role="TEXTER"))
    db.session.commit()

    links = UserOrganization.query.filter_by(user_id=existing_user.id).all()

    assert len(links) == 2
    assert {link.organization.name for link in links} == {"Test Organization"}
    assert len(db.session.get(Organization, test_organization.id).users) == 2
    assert repr(links[0]) == f"<UserOrganization user={existing_user.id} org={test_organization.id} role=TEXTER>"


def test_user_to_dict(existing_user):
    payload = existing_user.to_dict()

    assert payload["email"] == "existing@example.com"
    assert payload["auth0_id"] == "email|existing"
    assert payload["is_superadmin"] is False
    assert set(payload) >= {"id", "first_name", "last_name", "cell", "created_at", "updated_at"}
