"""LakeGrant — grants an identity access to a job-service account.

Default mode applies default entries to the well-known paths and the
current job-log partitions as independent background tasks, then
launches one background walk over the system tree and returns without
waiting.  Full replication mode runs the walk in the foreground.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .acl import apply_entry
from .buckets import locate_date_chain
from .config import GrantConfig
from .propagation import propagate
from .types import AclPermission, GrantResult

if TYPE_CHECKING:
    from .context import StoreContext
    from .protocol import DirectoryProvider
    from .tasks import TaskHandle, TaskRunner
    from .types import AccessEntry, Identity, PropagationStats

logger = logging.getLogger(__name__)


async def build_path_list(
    provider: DirectoryProvider,
    config: GrantConfig,
    now: datetime,
) -> list[str]:
    """Fixed paths followed by the job-log partition chain for *now*."""
    chain = await locate_date_chain(provider, config.log_root, now)
    return [*config.fixed_paths, *chain]


# ----------------------------------------------------------------------
# Background task bodies, each opening its own session from the context
# ----------------------------------------------------------------------


async def apply_in_session(
    context: StoreContext,
    path: str,
    identity: Identity,
    permission: AclPermission = AclPermission.ALL,
    is_default: bool = False,
) -> AccessEntry:
    async with context.session() as store:
        return await apply_entry(store, path, identity, permission, is_default)


async def propagate_in_session(
    context: StoreContext,
    start_path: str,
    identity: Identity,
    *,
    apply_to_files: bool = False,
) -> PropagationStats:
    async with context.session() as store:
        return await propagate(store, store, start_path, identity, apply_to_files=apply_to_files)


class LakeGrant:
    """Orchestrates a grant run against one account.

    Usage::

        with TaskRunner() as runner:
            grant = LakeGrant(StoreContext.for_account("myaccount"), runner)
            result = grant.grant_sync(identity)
            print(result.propagation.id)
            runner.wait_all()
    """

    def __init__(
        self,
        context: StoreContext,
        runner: TaskRunner,
        config: GrantConfig | None = None,
    ) -> None:
        self._context = context
        self._runner = runner
        self.config = config or GrantConfig()

    async def grant(
        self,
        identity: Identity,
        *,
        full_replication: bool = False,
        now: datetime | None = None,
    ) -> GrantResult:
        """Grant *identity* access.

        Errors raised while building the path list (including
        ``BucketNotFoundError``) propagate to the caller and no
        propagation is launched.  Failures of the submitted tasks are
        reported through their handles.
        """
        root = self.config.propagation_root

        if full_replication:
            logger.info("Full replication of %s from %s", identity, root)
            async with self._context.session(create_tables=True) as store:
                stats = await propagate(
                    store, store, root, identity, apply_to_files=self.config.apply_to_files
                )
            return GrantResult(
                success=True,
                message=(
                    f"Granted {identity} full access under {root}: "
                    f"{stats.directories} directories, {stats.files} files"
                ),
                identity=identity,
                full_replication=True,
                stats=stats,
            )

        now = now or datetime.now(UTC)
        applied: list[str] = []
        skipped: list[str] = []
        handles: list[TaskHandle] = []

        async with self._context.session(create_tables=True) as store:
            paths = await build_path_list(store, self.config, now)
            for path in paths:
                if not await store.exists(path):
                    logger.debug("Skipping missing path %s", path)
                    skipped.append(path)
                    continue
                handles.append(
                    self._runner.submit(
                        apply_in_session,
                        self._context,
                        path,
                        identity,
                        AclPermission.ALL,
                        True,
                        name=f"apply {path}",
                    )
                )
                applied.append(path)

        propagation = self._runner.submit(
            propagate_in_session,
            self._context,
            root,
            identity,
            apply_to_files=self.config.apply_to_files,
            name=f"propagate {root}",
        )
        logger.info(
            "Submitted %d path entries and propagation %s for %s",
            len(handles),
            propagation.id,
            identity,
        )

        return GrantResult(
            success=True,
            message=(
                f"Granted {identity} access to {len(applied)} paths; "
                f"propagation {propagation.id} running from {root}"
            ),
            identity=identity,
            applied_paths=applied,
            skipped_paths=skipped,
            date_chain=paths[len(self.config.fixed_paths):],
            entry_handles=handles,
            propagation=propagation,
        )

    def grant_sync(
        self,
        identity: Identity,
        *,
        full_replication: bool = False,
        now: datetime | None = None,
    ) -> GrantResult:
        """Run :meth:`grant` on the runner's loop and block until it returns."""
        return self._runner.run(
            self.grant(identity, full_replication=full_replication, now=now)
        )
