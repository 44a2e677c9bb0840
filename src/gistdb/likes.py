"""Operations on the ``likes`` join table and the matching ``nb_likes`` counter."""

import logging
from typing import List

from prometheus_client import Counter
from sqlalchemy import exists, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import SessionLocal
from .errors import NotFoundError, handle_store_error
from .models.gist import Gist
from .models.like import likes
from .models.user import User


logger = logging.getLogger(__name__)

LIKE_COUNTER = Counter("gist_likes_total", "Total like changes on gists", ["action"])


def _shift_like_counter(session: Session, gist_id: int, delta: int) -> None:
    session.query(Gist).filter(Gist.id == gist_id).update(
        {Gist.nb_likes: Gist.nb_likes + delta, Gist.updated_at: Gist.updated_at},
        synchronize_session=False,
    )


def add_like(user: User, gist: Gist) -> None:
    """Record that ``user`` likes ``gist`` and bump its like counter."""

    session: Session = SessionLocal()
    try:
        if session.get(Gist, gist.id) is None:
            raise NotFoundError(f"gist {gist.id} not found")
        if session.get(User, user.id) is None:
            raise NotFoundError(f"user {user.id} not found")
        session.execute(likes.insert().values(user_id=user.id, gist_id=gist.id))
        _shift_like_counter(session, gist.id, 1)
        session.commit()
        LIKE_COUNTER.labels(action="add").inc()
        logger.info("user %s liked gist %s", user.id, gist.id)
    except SQLAlchemyError as exc:
        handle_store_error(session, "add_like", exc)
    finally:
        session.close()


def remove_like(user: User, gist: Gist) -> None:
    """Drop the like of ``user`` on ``gist`` and decrement its like counter."""

    session: Session = SessionLocal()
    try:
        result = session.execute(
            likes.delete().where(likes.c.user_id == user.id, likes.c.gist_id == gist.id)
        )
        if result.rowcount == 0:
            raise NotFoundError(f"user {user.id} has not liked gist {gist.id}")
        _shift_like_counter(session, gist.id, -1)
        session.commit()
        LIKE_COUNTER.labels(action="remove").inc()
        logger.info("user %s unliked gist %s", user.id, gist.id)
    except SQLAlchemyError as exc:
        handle_store_error(session, "remove_like", exc)
    finally:
        session.close()


def has_like(user_id: int, gist_id: int) -> bool:
    session: Session = SessionLocal()
    try:
        found = session.query(
            exists().where(likes.c.user_id == user_id, likes.c.gist_id == gist_id)
        ).scalar()
        return bool(found)
    except SQLAlchemyError as exc:
        handle_store_error(session, "has_like", exc)
    finally:
        session.close()


def count_likes(gist_id: int) -> int:
    """Count like rows for a gist, independent of the cached ``nb_likes``."""

    session: Session = SessionLocal()
    try:
        return (
            session.query(func.count())
            .select_from(likes)
            .filter(likes.c.gist_id == gist_id)
            .scalar()
        )
    except SQLAlchemyError as exc:
        handle_store_error(session, "count_likes", exc)
    finally:
        session.close()


def get_liked_gists(user: User, offset: int) -> List[Gist]:
    """Return one page of the gists liked by ``user``, plus a has-more row."""

    session: Session = SessionLocal()
    try:
        return (
            session.query(Gist)
            .join(likes, likes.c.gist_id == Gist.id)
            .filter(likes.c.user_id == user.id)
            .order_by(Gist.id.asc())
            .offset(offset * settings.page_size)
            .limit(settings.page_size + 1)
            .all()
        )
    except SQLAlchemyError as exc:
        handle_store_error(session, "get_liked_gists", exc)
    finally:
        session.close()
