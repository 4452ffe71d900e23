"""
Session Scope for Chat Operations
=================================

One SQLAlchemy session per outermost chat call, shared with every nested
call through a context variable, so DAOs and core helpers receive it as a
plain `session` argument. Functions decorated with ``@transactional``
run inside one managed transaction: a conversation is never visible without
its initial message, and a message is never visible without the conversation
summary update that goes with it.

Key features
~~~~~~~~~~~~
- Context variable to store the active session (per thread / per task)
- Implicit reuse of existing sessions (nested calls join the outer transaction)
- Commit on success, rollback and re-raise on any error
- Session closed and context reset when the outermost call returns

"""

import contextvars
import logging
from functools import wraps

from sqlalchemy.orm import sessionmaker

from vetchat.database.config.connection_engine import connection_engine

logger = logging.getLogger(__name__)

SessionFactory = sessionmaker(bind=connection_engine, autoflush=False, expire_on_commit=False)
"""Session factory bound to the application engine."""

# --------------------------------------------------------------------
# Context variable to store the current database session.
# --------------------------------------------------------------------
db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Context variable storing the active SQLAlchemy session."""


def transactional(func):
    """
    Decorator to wrap functions in a managed SQLAlchemy transaction.

    Ensures that:
    - If a session already exists in context, it is reused.
    - Otherwise, a new session is created, committed, and closed.
    - On errors, the session is rolled back and closed, and the error propagates.

    Parameters
    ----------
    func : callable
        The function to wrap. It must accept a `session` keyword argument;
        callers pass every other argument by keyword.

    Returns
    -------
    callable
        The wrapped function, executed within a database transaction.

    Example
    -------
    >>> @transactional
    ... def count_users(session=None):
    ...     return session.query(User).count()
    ...
    >>> count_users()
    """
    @wraps(func)
    def wrap_func(*args, **kwargs):
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)

        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            logger.debug("Rolling back transaction of %s", func.__qualname__)
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
