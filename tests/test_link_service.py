"""Tests for link persistence: validation, two-phase save and CRUD."""

import pytest

pytestmark = pytest.mark.unit

from cmslink.exceptions import (
    ConfigurationError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from cmslink.models.link import Link


class TestSave:
    """Tests for saving links."""

    def test_create_url_link(self, link_service):
        """Test creating a basic link."""
        link = link_service.create_link(url="https://example.com", title="Example")
        assert link.id is not None
        assert link.link_type == "URL"
        assert link.title == "Example"
        assert link.class_name == "Link"
        assert link.created_at is not None

    def test_invalid_link_is_not_saved(self, link_service):
        """Test that validation failures block persistence."""
        with pytest.raises(ValidationError) as exc_info:
            link_service.create_link(link_type="Email", email="not-an-email")
        assert str(exc_info.value) == "Please enter a valid Email address"
        assert exc_info.value.field == "email"
        assert link_service.count_links() == 0

    def test_missing_reference_field(self, link_service):
        with pytest.raises(ValidationError) as exc_info:
            link_service.create_link(link_type="File")
        assert exc_info.value.field == "file_id"

    def test_unknown_field(self, link_service):
        with pytest.raises(ValidationError) as exc_info:
            link_service.create_link(url="/x", colour="red")
        assert exc_info.value.field == "colour"

    def test_id_cannot_be_set(self, link_service):
        with pytest.raises(ValidationError):
            link_service.create_link(id=42, url="/x")

    @pytest.mark.parametrize(
        "fields,expected",
        [
            ({"link_type": "URL", "url": "/about/"}, "/about/"),
            ({"link_type": "Email", "email": "a@b.com"}, "a@b.com"),
            ({"link_type": "Phone", "phone": "+1 555-1234"}, "+1 555-1234"),
            ({"link_type": "SiteTree", "site_tree_id": 10}, "About"),
            ({"link_type": "File", "file_id": 1}, "Annual report"),
        ],
    )
    def test_title_derived_after_create(self, link_service, fields, expected):
        """Test that a blank title is filled in after the first write."""
        link = link_service.create_link(**fields)
        assert link.title == expected

    def test_fallback_title_uses_id(self, link_service):
        """Test that unresolvable references get a generated title."""
        link = link_service.create_link(link_type="File", file_id=99)
        assert link.title == f"Link-{link.id}"

    def test_given_title_is_kept(self, link_service):
        link = link_service.create_link(url="/about/", title="Who we are")
        assert link.title == "Who we are"

    def test_title_not_rederived(self, link_service):
        """Test that the post-create step leaves existing titles alone."""
        link = link_service.create_link(url="/about/")
        assert link_service.fill_title(link) is False
        link.url = "/contact/"
        assert link_service.fill_title(link) is False
        assert link.title == "/about/"

    def test_update_does_not_rederive_title(self, link_service):
        link = link_service.create_link(url="/about/")
        updated = link_service.update_link(link.id, url="/team/")
        assert updated.url == "/team/"
        assert updated.title == "/about/"

    def test_post_create_steps_are_extensible(self, link_service):
        """Test that extra post-create steps run and trigger a second write."""
        calls = []

        def tag_new(link):
            calls.append(link.id)
            link.add_class("new")
            link.style = "button"
            return True

        link_service.post_create_steps.append(tag_new)
        link = link_service.create_link(url="/promo/", title="Promo")
        assert calls == [link.id]
        assert link_service.get_link(link.id).style == "button"

        link_service.update_link(link.id, title="Promo 2")
        assert len(calls) == 1

    def test_failing_post_create_step_rolls_back(self, link_service):
        def explode(link):
            raise RuntimeError("enrichment failed")

        link_service.post_create_steps.append(explode)
        with pytest.raises(DatabaseError) as exc_info:
            link_service.create_link(url="/x")
        assert isinstance(exc_info.value.original_error, RuntimeError)
        assert link_service.count_links() == 0

    def test_save_retries_after_failed_create(self, link_service):
        """Test that a link whose insert was rolled back is inserted again."""
        failures = [RuntimeError("enrichment failed")]

        def fail_once(link):
            if failures:
                raise failures.pop()
            return False

        link_service.post_create_steps.append(fail_once)
        link = Link(url="/retry/")
        with pytest.raises(DatabaseError):
            link_service.save(link)
        assert link.id is None
        assert not link.is_persisted
        assert link_service.resolver.resolve_url(link) is None

        link_service.save(link)
        assert link.id is not None
        assert link_service.count_links() == 1
        link_service.session.expire_all()
        assert link_service.get_link(link.id).url == "/retry/"

    def test_save_detached_link(self, link_service):
        """Test that a link loaded in an earlier session can still be updated."""
        link = link_service.create_link(url="/a/")
        assert link.url == "/a/"
        link_service.session.expunge(link)
        link.url = "/b/"
        link_service.save(link)
        link_service.session.expunge_all()
        assert link_service.get_link(link.id).url == "/b/"

    def test_subclass_round_trip(self, link_service, call_to_action_link_class):
        """Test that subclasses are stored and loaded polymorphically."""
        link = link_service.create_link(
            link_class=call_to_action_link_class, url="/signup/", style="Card"
        )
        link_service.session.expunge_all()
        loaded = link_service.get_link(link.id)
        assert type(loaded) is call_to_action_link_class
        assert loaded.class_name == "CallToActionLink"
        assert loaded.css_classes == []

    def test_save_existing_link(self, link_service):
        link = link_service.create_link(url="/a/")
        link.open_in_new_window = True
        link_service.save(link)
        assert link_service.get_link(link.id).open_in_new_window is True


class TestQueries:
    """Tests for reading, listing and deleting links."""

    def test_get_link_not_found(self, link_service):
        with pytest.raises(NotFoundError) as exc_info:
            link_service.get_link(12345)
        assert "Link" in str(exc_info.value)

    def test_update_link_not_found(self, link_service):
        with pytest.raises(NotFoundError):
            link_service.update_link(12345, url="/x")

    def test_update_link_invalid(self, link_service):
        link = link_service.create_link(link_type="Email", email="good@example.com")
        with pytest.raises(ValidationError) as exc_info:
            link_service.update_link(link.id, email="not-an-email")
        assert exc_info.value.field == "email"
        assert link.email == "good@example.com"

        # A later commit on the same session must not write the rejected value
        link_service.create_link(url="/other/")
        link_service.session.expire_all()
        assert link_service.get_link(link.id).email == "good@example.com"

    def test_list_links_by_type(self, link_service, sample_links):
        emails = link_service.list_links(link_type="Email")
        assert [link.email for link in emails] == ["hello@example.com"]
        assert len(link_service.list_links()) == 5
        assert link_service.count_links("Phone") == 1

    def test_list_links_pagination(self, link_service, sample_links):
        first = link_service.list_links(limit=2)
        rest = link_service.list_links(limit=10, offset=2)
        assert len(first) == 2
        assert len(rest) == 3
        assert {link.id for link in first}.isdisjoint({link.id for link in rest})

    def test_list_links_unknown_type(self, link_service):
        with pytest.raises(ConfigurationError):
            link_service.list_links(link_type="Fax")

    def test_delete_link(self, link_service, sample_links):
        link_id = sample_links["File"].id
        assert link_service.delete_link(link_id) is True
        with pytest.raises(NotFoundError):
            link_service.get_link(link_id)
        assert link_service.resolver.lookup.find_by_id("File", 1) is not None

    def test_delete_link_not_found(self, link_service):
        assert link_service.delete_link(12345) is False

    def test_links_by_reference(self, link_service, sample_links):
        links = link_service.link_repo.get_by_reference("site_tree_id", 10)
        assert [link.id for link in links] == [sample_links["SiteTree"].id]


class TestReport:
    """Tests for the link report."""

    def test_report(self, link_service, sample_links, lookup):
        lookup.remove("File", 1)
        report = link_service.generate_link_report()
        assert report["total_links"] == 5
        assert report["by_type"] == {
            "URL": 1,
            "Email": 1,
            "Phone": 1,
            "File": 1,
            "SiteTree": 1,
        }
        assert report["broken_links"] == [
            {"id": sample_links["File"].id, "title": "Annual report", "type": "File"}
        ]
        assert report["unset_links"] == []

    def test_report_by_type(self, link_service, sample_links):
        report = link_service.generate_link_report(link_type="Email")
        assert report["total_links"] == 1
        assert report["broken_links"] == []

    def test_report_unknown_type(self, link_service):
        with pytest.raises(ConfigurationError):
            link_service.generate_link_report(link_type="Fax")
