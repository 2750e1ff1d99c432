"""Tests for transaction links and tags."""

from datetime import date

import pytest

from conftest import OTHER_USER, USER
from pocketpilot.domain.errors import ConflictError, NotFoundError, ValidationError
from pocketpilot.domain.links import TransactionLinkService
from pocketpilot.domain.tags import TagService


@pytest.fixture
def link_service(temp_db):
    return TransactionLinkService(temp_db)


@pytest.fixture
def tag_service(temp_db):
    return TagService(temp_db)


class TestLinks:
    def test_link_refund(self, link_service, make_transaction):
        purchase = make_transaction(-80, "Shoes")
        refund = make_transaction(80, "Shoes refund", date(2024, 3, 20))

        link_id = link_service.create_link(USER, refund, purchase, "refund", notes="returned")

        (link,) = link_service.list_links(USER, transaction_id=purchase)
        assert link.id == link_id
        assert link.source_transaction_id == refund
        assert link.target_transaction_id == purchase
        assert link.link_type == "refund"
        assert link.notes == "returned"
        assert link_service.list_links(USER, transaction_id=refund)[0].id == link_id

    def test_duplicate_link(self, link_service, make_transaction):
        a, b = make_transaction(-1), make_transaction(1)
        link_service.create_link(USER, a, b, "related")
        with pytest.raises(ConflictError):
            link_service.create_link(USER, a, b, "related")
        link_service.create_link(USER, a, b, "chargeback")

    def test_invalid_links(self, link_service, make_transaction):
        a, b = make_transaction(-1), make_transaction(1)
        with pytest.raises(ValidationError):
            link_service.create_link(USER, a, a, "related")
        with pytest.raises(ValidationError):
            link_service.create_link(USER, a, b, "sibling")
        with pytest.raises(NotFoundError):
            link_service.create_link(USER, a, 9999, "related")
        with pytest.raises(NotFoundError):
            link_service.create_link(OTHER_USER, a, b, "related")

    def test_update_and_delete(self, link_service, make_transaction):
        a, b = make_transaction(-1), make_transaction(1)
        link_id = link_service.create_link(USER, a, b, "related")

        link_service.update_link(USER, link_id, link_type="partial_refund")
        assert link_service.list_links(USER)[0].link_type == "partial_refund"

        link_service.delete_link(USER, link_id)
        assert link_service.list_links(USER) == []
        with pytest.raises(NotFoundError):
            link_service.delete_link(USER, link_id)

    def test_deleting_transaction_removes_links(self, link_service, make_transaction, transaction_service):
        a, b = make_transaction(-1), make_transaction(1)
        link_service.create_link(USER, a, b, "related")

        transaction_service.delete_transaction(USER, a)

        assert link_service.list_links(USER) == []


class TestTags:
    def test_create_and_list(self, tag_service):
        tag_service.create_tag(USER, "vacation")
        tag_service.create_tag(USER, "business", color="#ff0000")

        tags = tag_service.list_tags(USER)
        assert [(tag.name, count) for tag, count in tags] == [("business", 0), ("vacation", 0)]
        assert tags[1][0].color == "#6b7280"

    @pytest.mark.parametrize("name,color", [("", "#ffffff"), ("x" * 31, "#ffffff"), ("ok", "red")])
    def test_invalid(self, tag_service, name, color):
        with pytest.raises(ValidationError):
            tag_service.create_tag(USER, name, color)

    def test_duplicate_name(self, tag_service):
        tag_service.create_tag(USER, "Vacation")
        with pytest.raises(ConflictError):
            tag_service.create_tag(USER, "vacation")

    def test_tag_transactions(self, tag_service, make_transaction):
        tag_id = tag_service.create_tag(USER, "trip")
        a, b = make_transaction(-10), make_transaction(-20)

        assert tag_service.tag_transactions(USER, tag_id, [a, b]) == 2
        assert tag_service.tag_transactions(USER, tag_id, [a]) == 0
        assert [t.name for t in tag_service.tags_for_transaction(USER, a)] == ["trip"]
        assert tag_service.list_tags(USER)[0][1] == 2

        tag_service.untag_transaction(USER, tag_id, a)
        assert tag_service.tags_for_transaction(USER, a) == []
        with pytest.raises(NotFoundError):
            tag_service.untag_transaction(USER, tag_id, a)

    def test_tag_unknown_transaction(self, tag_service):
        tag_id = tag_service.create_tag(USER, "trip")
        with pytest.raises(NotFoundError):
            tag_service.tag_transactions(USER, tag_id, [9999])

    def test_delete_tag_detaches(self, tag_service, make_transaction):
        tag_id = tag_service.create_tag(USER, "trip")
        a = make_transaction(-10)
        tag_service.tag_transactions(USER, tag_id, [a])

        tag_service.delete_tag(USER, tag_id)

        assert tag_service.tags_for_transaction(USER, a) == []
        assert tag_service.list_tags(USER) == []
