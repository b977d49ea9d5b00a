"""
Server-side storage of movement composers.

Composer state is kept in the shared cache, not in the session cookie, so a
submission that answers late sees what other requests did to the dialog while
it was waiting on the backend. Entries are scoped to an owner (one browser
session) and a direction.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from pharmacy_inventory.business.movements.composer import MovementComposer
from pharmacy_inventory.business.movements.direction import MovementDirection
from pharmacy_inventory.business.movements.errors import ValidationError
from pharmacy_inventory.business.movements.submitter import (
    GENERIC_FAILURE_MESSAGE,
    MovementSubmitter,
    SubmissionResult,
)
from pharmacy_inventory.logger import get_logger

logger = get_logger("pharmacy_inventory.business.movements.store")

# Cache key prefixes
COMPOSER_KEY_PREFIX = "composer:"
SUBMIT_LOCK_KEY_PREFIX = "composer_submit:"

# A claim outlives any backend call; it is released as soon as the call returns
SUBMIT_LOCK_TTL = 120


class ComposerStore:
    """
    Load, save and submit composers through a Flask-Caching cache.

    Args:
        cache: Anything with the get/set/add/delete methods of flask_caching.Cache
    """

    def __init__(self, cache):
        self.cache = cache

    @staticmethod
    def composer_key(owner: str, direction: MovementDirection) -> str:
        return f"{COMPOSER_KEY_PREFIX}{owner}:{direction.value}"

    @staticmethod
    def lock_key(owner: str, direction: MovementDirection) -> str:
        return f"{SUBMIT_LOCK_KEY_PREFIX}{owner}:{direction.value}"

    def load(self, owner: str, direction: MovementDirection) -> MovementComposer:
        raw = self.cache.get(self.composer_key(owner, direction))
        if not isinstance(raw, dict):
            raw = None
        return MovementComposer.from_state(direction, raw)

    def save(self, owner: str, composer: MovementComposer) -> None:
        self.cache.set(self.composer_key(owner, composer.direction), composer.to_state())

    def submit(self, owner: str, composer: MovementComposer, submitter: MovementSubmitter,
               on_success: Optional[Callable[[], None]] = None) -> Tuple[SubmissionResult, bool]:
        """
        Submit the composer and apply the result to whatever is stored once the
        backend has answered.

        The SUBMITTING state is saved before the backend call. Afterwards the
        stored composer is reloaded and the result is applied only if it is still
        the same dialog; a dialog closed or reopened in the meantime keeps its
        current state.

        Returns:
            (result, applied): the backend outcome and whether it changed the stored dialog

        Raises:
            ValidationError: The composer cannot be submitted, or another
                submission of the same dialog is in flight
        """
        direction = composer.direction
        dialog_id = composer.begin_submit()
        lock_key = self.lock_key(owner, direction)
        if not self.cache.add(lock_key, dialog_id, timeout=SUBMIT_LOCK_TTL):
            raise ValidationError("A submission is already in progress")

        try:
            self.save(owner, composer)
            try:
                result = submitter.submit(composer.header, composer.basket, on_success=on_success)
            except Exception:
                self._finish(owner, direction, SubmissionResult(ok=False, message=GENERIC_FAILURE_MESSAGE), dialog_id)
                raise
            applied = self._finish(owner, direction, result, dialog_id)
        finally:
            self.cache.delete(lock_key)

        if not applied:
            logger.info(f"Dialog {dialog_id} ({direction.value}) changed while submitting; "
                        f"{'success' if result.ok else 'failure'} not applied")
        return result, applied

    def _finish(self, owner: str, direction: MovementDirection, result: SubmissionResult, dialog_id: str) -> bool:
        stored = self.load(owner, direction)
        applied = stored.finish_submit(result, dialog_id)
        if applied:
            self.save(owner, stored)
        return applied
