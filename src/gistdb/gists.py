"""Minimal gist repository used alongside the user repository."""

import logging

from prometheus_client import Counter
from sqlalchemy import exists
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import SessionLocal
from .errors import ConflictError, NotFoundError, handle_store_error
from .models.gist import Gist
from .models.user import User


logger = logging.getLogger(__name__)

FORK_COUNTER = Counter("gist_forks_total", "Total gists forked")


def create_gist(gist: Gist) -> Gist:
    session: Session = SessionLocal()
    try:
        if session.get(User, gist.user_id) is None:
            raise NotFoundError(f"user {gist.user_id} not found")
        session.add(gist)
        session.commit()
        logger.info("created gist id=%s user=%s", gist.id, gist.user_id)
        return gist
    except SQLAlchemyError as exc:
        handle_store_error(session, "create_gist", exc)
    finally:
        session.close()


def get_gist_by_id(gist_id: int) -> Gist:
    session: Session = SessionLocal()
    try:
        gist = session.query(Gist).filter(Gist.id == gist_id).first()
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_gist_by_id", exc)
    finally:
        session.close()

    if gist is None:
        raise NotFoundError(f"gist {gist_id} not found")
    return gist


def fork_gist(gist: Gist, user: User) -> Gist:
    """Copy ``gist`` into a new gist owned by ``user``.

    The parent's ``nb_forks`` is incremented in the same transaction,
    leaving its ``updated_at`` as it was. A user may not fork their own
    gist, nor fork the same gist twice.
    """

    session: Session = SessionLocal()
    try:
        parent = session.get(Gist, gist.id)
        if parent is None:
            raise NotFoundError(f"gist {gist.id} not found")
        if parent.user_id == user.id:
            raise ConflictError(f"user {user.id} owns gist {parent.id}")
        already_forked = session.query(
            exists().where(Gist.forked_id == parent.id, Gist.user_id == user.id)
        ).scalar()
        if already_forked:
            raise ConflictError(f"user {user.id} already forked gist {parent.id}")

        fork = Gist(
            title=parent.title,
            description=parent.description,
            private=parent.private,
            nb_files=parent.nb_files,
            user_id=user.id,
            forked_id=parent.id,
        )
        session.add(fork)
        session.query(Gist).filter(Gist.id == parent.id).update(
            {Gist.nb_forks: Gist.nb_forks + 1, Gist.updated_at: Gist.updated_at},
            synchronize_session=False,
        )
        session.commit()
        FORK_COUNTER.inc()
        logger.info("user %s forked gist %s into %s", user.id, parent.id, fork.id)
        return fork
    except SQLAlchemyError as exc:
        handle_store_error(session, "fork_gist", exc)
    finally:
        session.close()
