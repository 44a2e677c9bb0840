import pytest

from gistdb import gists, likes
from gistdb.errors import ConflictError, NotFoundError
from gistdb.models import Gist, User


def test_add_like_bumps_counter_without_touching_updated_at(make_user, make_gist):
    owner = make_user()
    fan = make_user()
    gist = make_gist(owner, updated_at=1000)

    likes.add_like(fan, gist)

    stored = gists.get_gist_by_id(gist.id)
    assert stored.nb_likes == 1
    assert stored.updated_at == 1000
    assert likes.has_like(fan.id, gist.id)
    assert likes.count_likes(gist.id) == 1


def test_add_like_twice_conflicts(make_user, make_gist):
    owner = make_user()
    fan = make_user()
    gist = make_gist(owner)
    likes.add_like(fan, gist)

    with pytest.raises(ConflictError):
        likes.add_like(fan, gist)

    assert gists.get_gist_by_id(gist.id).nb_likes == 1


def test_remove_like_decrements_counter(make_user, make_gist):
    owner = make_user()
    fan = make_user()
    gist = make_gist(owner)
    likes.add_like(fan, gist)
    likes.add_like(owner, gist)

    likes.remove_like(fan, gist)

    assert gists.get_gist_by_id(gist.id).nb_likes == 1
    assert not likes.has_like(fan.id, gist.id)
    assert likes.count_likes(gist.id) == 1


def test_remove_missing_like_raises_not_found(make_user, make_gist):
    owner = make_user()
    gist = make_gist(owner)

    with pytest.raises(NotFoundError):
        likes.remove_like(owner, gist)

    assert gists.get_gist_by_id(gist.id).nb_likes == 0


def test_get_liked_gists_pages_by_id(make_user, make_gist):
    owner = make_user()
    fan = make_user()
    created = [make_gist(owner) for _ in range(12)]
    for gist in created:
        likes.add_like(fan, gist)
    make_gist(owner)

    first_page = likes.get_liked_gists(fan, 0)
    assert [g.id for g in first_page] == [g.id for g in created[:11]]
    assert [g.id for g in likes.get_liked_gists(fan, 1)] == [g.id for g in created[10:]]
    assert likes.get_liked_gists(owner, 0) == []


def test_like_on_missing_gist_raises_not_found(make_user):
    fan = make_user()

    with pytest.raises(NotFoundError):
        likes.add_like(fan, Gist(id=999))

    assert likes.count_likes(999) == 0


def test_like_by_missing_user_raises_not_found(make_user, make_gist):
    gist = make_gist(make_user())

    with pytest.raises(NotFoundError):
        likes.add_like(User(id=999, username="ghost", password="x"), gist)

    assert gists.get_gist_by_id(gist.id).nb_likes == 0
