import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.services import link_service, profile_service


@pytest.fixture()
def profile_id(db, alice):
    return profile_service.get_or_create_profile(db, alice)["id"]


@pytest.fixture()
def three_links(db, profile_id):
    return [
        link_service.create_link(db, profile_id, title, f"https://{title}.example", title)
        for title in ("github", "linkedin", "twitter")
    ]


def test_create_link_appends_after_highest_order(db, profile_id, three_links):
    assert [link.order for link in three_links] == [0, 1, 2]
    extra = link_service.create_link(db, profile_id, "blog", "https://blog.example", "globe")
    assert extra.order == 3


def test_create_link_keeps_explicit_order(db, profile_id):
    link = link_service.create_link(db, profile_id, "site", "https://site.example", "globe", order=7)
    assert link.order == 7
    assert link_service.create_link(db, profile_id, "next", "https://n.example", "globe").order == 8


def test_reorder_assigns_index_as_order(db, profile_id, three_links):
    first, second, third = three_links
    result = link_service.reorder_links(db, profile_id, [third.id, first.id, second.id])

    assert [link.id for link in result] == [third.id, first.id, second.id]
    assert [link.order for link in result] == [0, 1, 2]
    fetched = link_service.get_links(db, profile_id)
    assert [(link.id, link.order) for link in fetched] == [(third.id, 0), (first.id, 1), (second.id, 2)]


def test_reorder_subset_renumbers_omitted_links_after_listed(db, profile_id, three_links):
    first, second, third = three_links
    result = link_service.reorder_links(db, profile_id, [third.id])

    assert [link.id for link in result] == [third.id, first.id, second.id]
    assert [link.order for link in result] == [0, 1, 2]


def test_reorder_rejects_foreign_link_without_writing(db, profile_id, three_links, bob):
    other_profile = profile_service.get_or_create_profile(db, bob)["id"]
    foreign = link_service.create_link(db, other_profile, "x", "https://x.example", "x")
    first, second, third = three_links

    with pytest.raises(NotFoundError):
        link_service.reorder_links(db, profile_id, [third.id, foreign.id, first.id])

    db.expire_all()
    assert [link.id for link in link_service.get_links(db, profile_id)] == [first.id, second.id, third.id]
    assert link_service.get_links(db, other_profile)[0].order == 0


def test_reorder_rejects_duplicate_ids(db, profile_id, three_links):
    with pytest.raises(ValidationError):
        link_service.reorder_links(db, profile_id, [three_links[0].id, three_links[0].id])


def test_delete_leaves_other_orders_untouched(db, profile_id, three_links):
    first, second, third = three_links
    link_service.delete_link(db, profile_id, second.id)

    remaining = link_service.get_links(db, profile_id)
    assert [(link.id, link.order) for link in remaining] == [(first.id, 0), (third.id, 2)]


def test_update_link_changes_only_given_fields(db, profile_id, three_links):
    link = link_service.update_link(db, profile_id, three_links[0].id, {"title": "GitHub"})
    assert link.title == "GitHub"
    assert link.url == "https://github.example"
    assert link.icon == "github"


def test_update_link_rejects_null_for_required_field(db, profile_id, three_links):
    with pytest.raises(ValidationError):
        link_service.update_link(db, profile_id, three_links[0].id, {"url": None})


def test_mutations_on_foreign_link_are_not_found(db, profile_id, bob):
    other_profile = profile_service.get_or_create_profile(db, bob)["id"]
    foreign = link_service.create_link(db, other_profile, "x", "https://x.example", "x")

    with pytest.raises(NotFoundError):
        link_service.update_link(db, profile_id, foreign.id, {"title": "hijacked"})
    with pytest.raises(NotFoundError):
        link_service.delete_link(db, profile_id, foreign.id)
    assert link_service.get_links(db, other_profile)[0].title == "x"
