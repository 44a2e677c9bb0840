"""User repository: lookups, CRUD and the gist counter upkeep done on delete."""

import logging
from typing import List

from prometheus_client import Counter
from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, selectinload

from .config import settings
from .database import SessionLocal
from .errors import NotFoundError, handle_store_error
from .likes import has_like
from .models.gist import Gist
from .models.like import likes
from .models.ssh_key import SSHKey
from .models.user import User, avatar_hash


logger = logging.getLogger(__name__)

USER_CREATED_COUNTER = Counter("users_created_total", "Total users created")
USER_DELETED_COUNTER = Counter("users_deleted_total", "Total users deleted")


def _username_matches(username: str):
    """Case-insensitive equality on the username column."""
    return func.lower(User.username) == username.lower()


def _column_value(user: User, attr):
    """Value of a mapped column on ``user``, or its column default when unset."""
    value = getattr(user, attr.key)
    default = attr.columns[0].default
    if value is None and default is not None:
        if default.is_callable:
            return default.arg(None)
        return default.arg
    return value


def _decrement_like_counters(session: Session, user_id: int) -> int:
    liked_ids = select(likes.c.gist_id).where(likes.c.user_id == user_id)
    return (
        session.query(Gist)
        .filter(Gist.id.in_(liked_ids))
        .update(
            {Gist.nb_likes: Gist.nb_likes - 1, Gist.updated_at: Gist.updated_at},
            synchronize_session=False,
        )
    )


def _decrement_fork_counters(session: Session, user_id: int) -> int:
    # aliased so the subquery is not correlated with the UPDATE target
    owned = aliased(Gist)
    parent_ids = select(owned.forked_id).where(
        owned.user_id == user_id, owned.forked_id.isnot(None)
    )
    return (
        session.query(Gist)
        .filter(Gist.id.in_(parent_ids))
        .update(
            {Gist.nb_forks: Gist.nb_forks - 1, Gist.updated_at: Gist.updated_at},
            synchronize_session=False,
        )
    )


def before_user_delete(session: Session, user: User) -> None:
    """Fix the like and fork counters of gists that reference ``user``.

    Must run inside the transaction that deletes the user. The like rows
    themselves are dropped by the ``likes`` foreign keys, only the
    denormalized counters need correcting here. ``updated_at`` is written
    back unchanged since this is not a content change.
    """
    liked = _decrement_like_counters(session, user.id)
    forked = _decrement_fork_counters(session, user.id)
    logger.debug(
        "user %s delete: decremented likes on %d gists, forks on %d gists",
        user.id,
        liked,
        forked,
    )


def user_exists(username: str) -> bool:
    """Return whether a user with this username exists, ignoring case."""

    session: Session = SessionLocal()
    try:
        count = session.query(func.count(User.id)).filter(_username_matches(username)).scalar()
        return count > 0
    except SQLAlchemyError as exc:
        handle_store_error(session, "user_exists", exc)
    finally:
        session.close()


def get_all_users(offset: int) -> List[User]:
    """Return one page of users ordered by id.

    Up to ``page_size + 1`` rows are returned: the extra row only tells the
    caller that another page exists and is not part of this page.
    """

    session: Session = SessionLocal()
    try:
        return (
            session.query(User)
            .order_by(User.id.asc())
            .offset(offset * settings.page_size)
            .limit(settings.page_size + 1)
            .all()
        )
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_all_users", exc)
    finally:
        session.close()


def get_user_by_username(username: str) -> User:
    session: Session = SessionLocal()
    try:
        user = session.query(User).filter(_username_matches(username)).first()
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_user_by_username", exc)
    finally:
        session.close()

    if user is None:
        logger.debug("no user named %s", username)
        raise NotFoundError(f"user {username!r} not found")
    return user


def get_user_by_id(user_id: int) -> User:
    session: Session = SessionLocal()
    try:
        user = session.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_user_by_id", exc)
    finally:
        session.close()

    if user is None:
        logger.debug("no user with id %s", user_id)
        raise NotFoundError(f"user {user_id} not found")
    return user


def get_user_by_ssh_key_id(ssh_key_id: int) -> User:
    """Return the owner of an SSH key with its ``ssh_keys`` already loaded."""

    session: Session = SessionLocal()
    try:
        user = (
            session.query(User)
            .options(selectinload(User.ssh_keys))
            .join(SSHKey, User.id == SSHKey.user_id)
            .filter(SSHKey.id == ssh_key_id)
            .first()
        )
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_user_by_ssh_key_id", exc)
    finally:
        session.close()

    if user is None:
        logger.debug("no user owns ssh key %s", ssh_key_id)
        raise NotFoundError(f"no user for ssh key {ssh_key_id}")
    return user


def create_user(user: User) -> User:
    """Insert a new user, raising ``ConflictError`` if the username is taken."""

    if not user.md5_hash:
        user.md5_hash = avatar_hash(user.email)

    session: Session = SessionLocal()
    try:
        session.add(user)
        session.commit()
        USER_CREATED_COUNTER.inc()
        logger.info("created user id=%s username=%s", user.id, user.username)
        return user
    except SQLAlchemyError as exc:
        handle_store_error(session, "create_user", exc)
    finally:
        session.close()


def update_user(user: User) -> User:
    """Overwrite every column of the stored row with the values of ``user``.

    Columns left unset on ``user`` are written with their column default,
    and an empty ``md5_hash`` is regenerated from the email. Relationships
    are not touched.
    """

    if not user.md5_hash:
        user.md5_hash = avatar_hash(user.email)

    session: Session = SessionLocal()
    try:
        persisted = session.get(User, user.id)
        if persisted is None:
            raise NotFoundError(f"user {user.id} not found")
        for attr in inspect(User).column_attrs:
            setattr(persisted, attr.key, _column_value(user, attr))
        session.commit()
        logger.info("updated user id=%s", persisted.id)
        return persisted
    except SQLAlchemyError as exc:
        handle_store_error(session, "update_user", exc)
    finally:
        session.close()


def delete_user(user: User) -> None:
    """Delete ``user`` together with its gists, SSH keys and likes.

    Counter upkeep and the row deletion share one transaction; on any
    failure nothing is committed.
    """

    session: Session = SessionLocal()
    try:
        persisted = session.get(User, user.id)
        if persisted is None:
            raise NotFoundError(f"user {user.id} not found")
        before_user_delete(session, persisted)
        session.delete(persisted)
        session.commit()
        USER_DELETED_COUNTER.inc()
        logger.info("deleted user id=%s username=%s", persisted.id, persisted.username)
    except SQLAlchemyError as exc:
        handle_store_error(session, "delete_user", exc)
    finally:
        session.close()


def set_admin(user: User) -> None:
    """Grant admin rights, touching only the ``is_admin`` column."""

    session: Session = SessionLocal()
    try:
        updated = (
            session.query(User)
            .filter(User.id == user.id)
            .update({User.is_admin: True}, synchronize_session=False)
        )
        if not updated:
            raise NotFoundError(f"user {user.id} not found")
        session.commit()
        user.is_admin = True
        logger.info("granted admin to user id=%s", user.id)
    except SQLAlchemyError as exc:
        handle_store_error(session, "set_admin", exc)
    finally:
        session.close()


def has_liked(user: User, gist: Gist) -> bool:
    return has_like(user.id, gist.id)
