"""Mutation executor and reusable mutation handles.

A mutation writes through the data collaborator exactly once, then
invalidates the keys it declares as affected. Invalidation never happens
before the write has been acknowledged, so refetches always observe the
post-write state.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar, Union

from tenderdesk.query.keys import KeyMatcher
from tenderdesk.query.notifications import notify_failure, notify_success
from tenderdesk.query.store import QueryStore
from tenderdesk.shared.error_handling import error_message as default_error_message
from tenderdesk.shared.error_handling import map_exception_to_error
from tenderdesk.shared.errors import ErrorCode
from tenderdesk.shared.logging import log_operation_error, log_operation_success
from tenderdesk.shared.protocols import NotifierProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")

Invalidates = Union[Iterable[KeyMatcher], Callable[[Any], Iterable[KeyMatcher]]]
SuccessMessage = Union[str, Callable[[Any], Union[str, None]], None]
ErrorMessage = Union[str, Callable[[BaseException], str], None]


class MutationExecutor:
    """Runs writes and applies their invalidation sets."""

    def __init__(self, store: QueryStore, notifier: NotifierProtocol | None = None) -> None:
        self._store = store
        self._notifier = notifier

    @property
    def notifier(self) -> NotifierProtocol | None:
        return self._notifier

    async def run(
        self,
        mutate_fn: Callable[[], Awaitable[T]],
        *,
        invalidates: Invalidates = (),
        success_message: SuccessMessage = None,
        error_message: ErrorMessage = None,
        operation: str = "mutation",
    ) -> T:
        """Run ``mutate_fn`` once and invalidate the affected keys.

        Args:
            mutate_fn: The write, called exactly once
            invalidates: Keys, key prefixes or predicates to invalidate, or a
                callable computing them from the write's result
            success_message: Notification on success; a callable receives
                the result and may return None to stay silent
            error_message: Overrides the failure notification; by default
                the error's own message is shown
            operation: Name used in logs

        Returns:
            The result of ``mutate_fn``

        Raises:
            Exception: Whatever ``mutate_fn`` raised, unchanged. The cache is
                left untouched in that case.
        """
        started = time.monotonic()
        try:
            result = await mutate_fn()
        except Exception as exc:
            error = map_exception_to_error(exc, operation, default_code=ErrorCode.MUTATION_FAILED)
            log_operation_error(logger, error, operation=operation)
            notify_failure(self._notifier, self._failure_text(exc, error_message))
            raise

        # The write is acknowledged from here on; nothing below may fail it
        try:
            matchers = list((invalidates(result) if callable(invalidates) else invalidates) or ())
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Computing the invalidation set of %s failed", operation)
            matchers = []
        refetched = self._store.invalidate_many(matchers)

        try:
            message = success_message(result) if callable(success_message) else success_message
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Rendering the success message of %s failed", operation)
            message = None
        notify_success(self._notifier, message)

        log_operation_success(
            logger,
            operation=operation,
            duration_ms=(time.monotonic() - started) * 1000,
            result_info={"invalidated": len(matchers), "refetched": len(refetched)},
        )
        return result

    @staticmethod
    def _failure_text(exc: BaseException, error_message: ErrorMessage) -> str:
        if callable(error_message):
            return error_message(exc)
        if error_message:
            return error_message
        return default_error_message(exc)


class Mutation(Generic[T]):
    """Reusable handle around one kind of write.

    Callables given for ``invalidates`` and ``success_message`` receive the
    result followed by the arguments the mutation was called with, so a
    delete returning nothing can still invalidate by the id it was given.

    Example:
        >>> delete = Mutation(executor, api.delete_result, invalidates=lambda _, rid, tid: [("bid-results", tid)])
        >>> await delete("R1", "T1")
    """

    def __init__(
        self,
        executor: MutationExecutor,
        mutate_fn: Callable[..., Awaitable[T]],
        *,
        invalidates: Iterable[KeyMatcher] | Callable[..., Iterable[KeyMatcher]] = (),
        success_message: str | Callable[..., str | None] | None = None,
        error_message: ErrorMessage = None,
        name: str | None = None,
    ) -> None:
        self._executor = executor
        self._mutate_fn = mutate_fn
        self._invalidates = invalidates
        self._success_message = success_message
        self._error_message = error_message
        self.name = name or getattr(mutate_fn, "__name__", "mutation")
        self._pending = 0
        self.last_result: T | None = None
        self.last_error: BaseException | None = None

    @property
    def is_pending(self) -> bool:
        return self._pending > 0

    async def __call__(self, *args: Any, **kwargs: Any) -> T:
        invalidates: Invalidates = self._invalidates
        if callable(self._invalidates):
            compute = self._invalidates
            invalidates = lambda result: compute(result, *args, **kwargs)  # noqa: E731

        success_message: SuccessMessage = self._success_message
        if callable(self._success_message):
            render = self._success_message
            success_message = lambda result: render(result, *args, **kwargs)  # noqa: E731

        self._pending += 1
        try:
            result = await self._executor.run(
                lambda: self._mutate_fn(*args, **kwargs),
                invalidates=invalidates,
                success_message=success_message,
                error_message=self._error_message,
                operation=self.name,
            )
        except Exception as exc:
            self.last_error = exc
            raise
        finally:
            self._pending -= 1

        self.last_error = None
        self.last_result = result
        return result
