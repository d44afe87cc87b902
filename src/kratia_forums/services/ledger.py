"""Atomic write primitives over a SQLAlchemy session.

Every governance operation goes through :class:`AtomicStore` so that a
multi-document change is either committed as a whole or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from kratia_forums.core.errors import InfrastructureError, KratiaError
from kratia_forums.core.settings import settings

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Conflicts a fresh attempt can resolve (lock timeouts, serialization failures).
_RETRYABLE = (OperationalError, StaleDataError)


class AtomicStore:
    """Minimal transactional store used by the governance services.

    ``transact`` runs a read-modify-write function and retries it on
    write conflicts; ``batch_write`` commits a group of writes exactly once.
    Both roll back on any failure so callers never observe partial state.
    """

    def __init__(self, session: Session, *, max_attempts: int | None = None) -> None:
        self.session = session
        self.max_attempts = max_attempts or settings.transaction_max_attempts

    def transact(self, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` in a transaction, retrying it on conflicting writes.

        Domain errors raised by ``fn`` abort the transaction and propagate
        unchanged. Storage errors are surfaced as ``InfrastructureError`` once
        the retry budget is spent.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                result = fn(self.session)
                self.session.commit()
                return result
            except KratiaError:
                self.session.rollback()
                raise
            except _RETRYABLE as exc:
                self.session.rollback()
                if attempt == self.max_attempts:
                    raise InfrastructureError("Transaction failed; please retry") from exc
                logger.warning(
                    "Transaction conflict (attempt %s/%s): %s",
                    attempt,
                    self.max_attempts,
                    exc,
                )
            except SQLAlchemyError as exc:
                self.session.rollback()
                raise InfrastructureError("Transaction failed; please retry") from exc
            except Exception:
                self.session.rollback()
                raise
        raise InfrastructureError("Transaction failed; please retry")  # pragma: no cover

    def batch_write(self, fn: Callable[[Session], T]) -> T:
        """Stage the writes made by ``fn`` and commit them once.

        Unlike ``transact`` a failed batch is not retried here: the caller
        decides whether the whole operation is safe to repeat.
        """
        try:
            result = fn(self.session)
            self.session.commit()
            return result
        except KratiaError:
            self.session.rollback()
            raise
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.warning("Batch commit failed: %s", exc)
            raise InfrastructureError("Batch commit failed; please retry") from exc
        except Exception:
            self.session.rollback()
            raise
