"""
Mutation pipeline: validate, deduplicate, persist and guard deletes.

Request flow for create/update::

    Received -> Validated | Rejected
    Validated -> (Genre create only) Deduplicated -> Committed | Failed

Deletes go through the integrity guard instead of the field validator.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..core.entities import Entity, EntityKind
from ..errors import NotFoundError
from ..hooks import (
    AFTER_COMMIT,
    AFTER_DELETE,
    AFTER_REJECT,
    BEFORE_COMMIT,
    HookDispatcher,
)
from ..hooks import hooks as default_hooks
from ..storage.base import DocumentStore, StoreError, StoreExecutionError
from ..utils import correlated, gather, get_logger
from ..utils.concurrency import DEFAULT_MAX_WORKERS
from ..validation import clean_fields, rules_for
from ..validation.errors import FieldError
from ..validation.rules import ReferenceListRule, ReferenceRule
from .dedup import GenreMatcher
from .integrity import IntegrityGuard
from .results import (
    Committed,
    DeleteResult,
    DeletionCheck,
    Failed,
    PipelineResult,
    Rejected,
)


class MutationPipeline:
    """
    Entry point used by request handlers for every create, update and delete.

    The pipeline never partially commits: a request either passes every rule
    and is written with a single store command, or nothing is written.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        hooks: Optional[HookDispatcher] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.store = store
        self.hooks = hooks if hooks is not None else default_hooks
        self.max_workers = max_workers
        self.matcher = GenreMatcher(store)
        self.guard = IntegrityGuard(store, max_workers=max_workers)
        self.logger = get_logger("services.pipeline")

    # ------------------------------------------------------------------ #
    # Create / update
    # ------------------------------------------------------------------ #
    @correlated
    def validate_and_create(
        self, kind: EntityKind | str, raw_fields: Mapping[str, Any]
    ) -> PipelineResult:
        kind = EntityKind(kind)
        candidate, errors = clean_fields(kind, raw_fields)
        try:
            errors = self._with_reference_errors(kind, candidate, errors)
            if errors:
                return self._reject(kind, candidate, errors, action="create")

            if kind is EntityKind.GENRE:
                existing = self.matcher.find_existing(candidate.name)  # type: ignore[attr-defined]
                if existing is not None:
                    self.logger.info(
                        "Genre %r already stored as %s; nothing written",
                        candidate.name,  # type: ignore[attr-defined]
                        existing.id,
                    )
                    return self._committed(
                        kind, existing, existing.id, created=False, deduplicated=True
                    )

            self.hooks.fire(BEFORE_COMMIT, candidate, kind=kind, action="create")
            candidate.id = self.store.insert(kind, candidate.to_document())
            if not candidate.id:
                raise StoreExecutionError(f"Store returned no identity for new {kind}")
        except StoreError as exc:
            return self._failed(kind, "create", exc)

        self.logger.info("Created %s %s", kind, candidate.id)
        self.hooks.fire(AFTER_COMMIT, candidate, kind=kind, action="create")
        return self._committed(kind, candidate, candidate.id, created=True)

    @correlated
    def validate_and_update(
        self, kind: EntityKind | str, identity: str, raw_fields: Mapping[str, Any]
    ) -> PipelineResult:
        """
        Replace the fields of an existing entity, keeping its identity.

        Genre names are not deduplicated here: renaming a Genre onto another
        Genre's name is accepted.
        """
        kind = EntityKind(kind)
        try:
            if self.store.find_by_id(kind, identity) is None:
                raise NotFoundError(kind, identity)

            candidate, errors = clean_fields(kind, raw_fields, identity=identity)
            errors = self._with_reference_errors(kind, candidate, errors)
            if errors:
                return self._reject(kind, candidate, errors, action="update")

            self.hooks.fire(BEFORE_COMMIT, candidate, kind=kind, action="update")
            if not self.store.update(kind, identity, candidate.to_document()):
                # Deleted between the lookup and the write.
                raise NotFoundError(kind, identity)
        except StoreError as exc:
            return self._failed(kind, "update", exc)

        self.logger.info("Updated %s %s", kind, identity)
        self.hooks.fire(AFTER_COMMIT, candidate, kind=kind, action="update")
        return self._committed(kind, candidate, identity, created=False)

    # ------------------------------------------------------------------ #
    # Delete
    # ------------------------------------------------------------------ #
    @correlated
    def check_deletable(self, kind: EntityKind | str, identity: str) -> DeletionCheck:
        return self.guard.check(kind, identity)

    @correlated
    def delete(self, kind: EntityKind | str, identity: str) -> DeleteResult:
        """
        Delete after re-checking dependents.

        Raises :class:`~libcatalog.errors.IntegrityViolation` when dependents
        exist and :class:`~libcatalog.errors.NotFoundError` for unknown
        identities. Store failures are reported as ``ok=False``.
        """
        kind = EntityKind(kind)
        try:
            entity = self.guard.delete(kind, identity)
        except StoreError as exc:
            self.logger.warning("Delete of %s %s failed: %s", kind, identity, exc)
            return DeleteResult(ok=False, reason=str(exc))
        self.hooks.fire(AFTER_DELETE, entity, kind=kind)
        return DeleteResult(ok=True)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _with_reference_errors(
        self, kind: EntityKind, candidate: Entity, errors: List[FieldError]
    ) -> List[FieldError]:
        """
        Add an error for every referenced identity that is not stored.

        Fields that already failed a rule are not looked up. Errors are
        returned in rule declaration order.
        """
        failed_fields = {error.field for error in errors}
        checks: List[tuple[str, EntityKind, str]] = []
        for rule in rules_for(kind):
            if not isinstance(rule, ReferenceRule) or rule.name in failed_fields:
                continue
            value = getattr(candidate, rule.name)
            identities = value if isinstance(rule, ReferenceListRule) else [value]
            for identity in identities:
                if identity:
                    checks.append((rule.name, rule.target, identity))

        if not checks:
            return errors

        found = gather(
            *[
                (lambda target=target, identity=identity: self.store.find_by_id(target, identity))
                for _, target, identity in checks
            ],
            max_workers=self.max_workers,
        )
        combined = list(errors)
        for (field_name, target, identity), document in zip(checks, found):
            if document is None:
                combined.append(FieldError(field_name, f"{target} '{identity}' does not exist."))
        return self._in_rule_order(kind, combined)

    @staticmethod
    def _in_rule_order(kind: EntityKind, errors: List[FieldError]) -> List[FieldError]:
        positions: Dict[str, int] = {rule.name: index for index, rule in enumerate(rules_for(kind))}
        return sorted(errors, key=lambda error: positions.get(error.field, len(positions)))

    def _reject(
        self, kind: EntityKind, candidate: Entity, errors: List[FieldError], *, action: str
    ) -> Rejected:
        self.logger.info(
            "Rejected %s %s with %d error(s) on %s",
            action,
            kind,
            len(errors),
            ", ".join(sorted({error.field for error in errors})),
        )
        self.hooks.fire(AFTER_REJECT, candidate, kind=kind, action=action, errors=errors)
        return Rejected(candidate=candidate, errors=errors)

    @staticmethod
    def _committed(
        kind: EntityKind,
        entity: Entity,
        identity: str,
        *,
        created: bool,
        deduplicated: bool = False,
    ) -> Committed:
        return Committed(
            kind=kind,
            identity=identity,
            reference=entity.url,
            created=created,
            deduplicated=deduplicated,
            entity=entity,
        )

    def _failed(self, kind: EntityKind, action: str, exc: StoreError) -> Failed:
        self.logger.warning("Store failure during %s of %s: %s", action, kind, exc)
        return Failed(reason=str(exc))
