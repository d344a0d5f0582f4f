"""RepoSyncManager: fetches both repositories, plans, and applies a sync."""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

from reposync.config import RepoLocation, SyncSettings
from reposync.config.settings import DEFAULT_MAX_WORKERS
from reposync.controller import S3Controller
from reposync.errors import (
    FetchError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    RemovalError,
    RepoSyncError,
    TransferError,
)
from reposync.index import build_index, check_index_consistency, publish_index
from reposync.models import (
    ExecutionReport,
    ManifestRecord,
    OperationResult,
    Stage,
    StoredObject,
    dump_manifest,
)
from reposync.plan import EXECUTABLE_ACTIONS, TRANSFER_ACTIONS, PlanOperation, SyncPlan, build_plan
from reposync.repo import ManifestSet, extract_key, parse_manifest, rewrite_url
from reposync.util.names import INDEX_NAME, JSON_CONTENT_TYPE, MANIFEST_SUFFIX

logger = logging.getLogger(__name__)


@dataclass
class ApplyContext:
    written: dict[str, ManifestRecord] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)


class RepoSyncManager:
    """High-level manager for a repository sync: Fetch -> Plan -> Apply."""

    def __init__(
        self,
        source: RepoLocation,
        destination: RepoLocation,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        profile_name: Optional[str] = None,
    ) -> None:
        self._source = source
        self._destination = destination
        self._max_workers = max_workers
        self._applied_plan_ids: set[str] = set()
        self._source_controller = S3Controller(source.aws_region, profile_name=profile_name)
        if source.aws_region == destination.aws_region:
            self._destination_controller = self._source_controller
        else:
            self._destination_controller = S3Controller(
                destination.aws_region, profile_name=profile_name
            )

    @classmethod
    def from_settings(
        cls,
        settings: SyncSettings,
        *,
        profile_name: Optional[str] = None,
    ) -> "RepoSyncManager":
        return cls(
            settings.source,
            settings.destination,
            max_workers=settings.max_workers,
            profile_name=profile_name,
        )

    @classmethod
    def from_controllers(
        cls,
        source: RepoLocation,
        destination: RepoLocation,
        source_controller: S3Controller,
        destination_controller: Optional[S3Controller] = None,
        *,
        max_workers: int = 1,
    ) -> "RepoSyncManager":
        """Create manager with injected controllers (useful for tests)."""
        obj = cls.__new__(cls)
        obj._source = source
        obj._destination = destination
        obj._max_workers = max_workers
        obj._applied_plan_ids = set()
        obj._source_controller = source_controller
        obj._destination_controller = destination_controller or source_controller
        return obj

    @property
    def source(self) -> RepoLocation:
        return self._source

    @property
    def destination(self) -> RepoLocation:
        return self._destination

    # ----------------------------
    # Fetch
    # ----------------------------
    def fetch_source(self) -> ManifestSet:
        """
        Fetch all source manifests.

        Raises:
            FetchError: if the repository cannot be listed, a manifest cannot
                be fetched, or there are no manifests at all.
            ParseError: if a manifest is malformed.
        """
        manifests = self._fetch_manifests(self._source, self._source_controller, origin="source")
        if not len(manifests):
            raise FetchError(
                f"No manifests found in {self._source.describe()}",
                details={"location": self._source.describe()},
            )
        return manifests

    def fetch_destination(self) -> ManifestSet:
        """Fetch all destination manifests (an empty repository is fine)."""
        return self._fetch_manifests(
            self._destination, self._destination_controller, origin="destination"
        )

    def fetch_source_index(self) -> StoredObject:
        """
        Fetch the source's aggregate index.

        Raises:
            FetchError: if there is no index in the source repository.
        """
        loc = self._source
        try:
            return self._source_controller.get(loc.bucket, loc.prefix, INDEX_NAME)
        except NotFoundError as exc:
            raise FetchError(
                f"No {INDEX_NAME} in source repo {loc.describe()}",
                details={"location": loc.describe(), "key": loc.prefix + INDEX_NAME},
                cause=exc,
            ) from exc
        except RepoSyncError as exc:
            if isinstance(exc, FetchError):
                raise
            raise FetchError(
                f"Failed to fetch {INDEX_NAME} from {loc.describe()}: {exc}",
                details={"location": loc.describe(), "key": loc.prefix + INDEX_NAME},
                cause=exc,
            ) from exc

    def check_source_consistency(self, source: ManifestSet) -> None:
        """
        Verify that the source index matches the source manifests.

        Raises:
            FetchError: if the index cannot be fetched.
            ParseError: if the index is malformed.
            ConsistencyMismatch: if the index is stale; callers decide
                whether to continue.
        """
        check_index_consistency(self.fetch_source_index(), source)

    # ----------------------------
    # Plan
    # ----------------------------
    def build_plan(self, source: ManifestSet, destination: ManifestSet) -> SyncPlan:
        if source.location != self._source or destination.location != self._destination:
            raise InvalidStateError("Manifest sets do not belong to this manager's repositories.")
        return build_plan(source, destination)

    # ----------------------------
    # Apply
    # ----------------------------
    def apply_plan(self, plan: SyncPlan) -> ExecutionReport:
        """
        Apply SyncPlan to the destination.

        Policy:
            - Adds/updates, then removals, in apply_order. The first failure
              stops the run: status 'failed', no index, no artifact removal.
            - The index is rebuilt from the final destination set and
              published before any queued artifact is removed.
            - Queued artifact removals are independent; failures are
              collected in removal_failures and do not fail the run.
            - Raise for fatal errors: InvalidArgument/InvalidState.
        """
        if (
            plan.source_location != self._source
            or plan.destination_location != self._destination
        ):
            raise InvalidStateError("Plan repositories do not match this manager.")
        if plan.plan_id in self._applied_plan_ids:
            raise InvalidStateError("Plan was already applied.", details={"plan_id": plan.plan_id})

        ops_by_id = _index_operations(plan.operations)
        _validate_apply_order(plan.apply_order, ops_by_id)

        self._applied_plan_ids.add(plan.plan_id)
        report = ExecutionReport(status="success", stopped_op_id=None, results=[])
        ctx = ApplyContext()

        if self.transfer(plan, report, ctx, ops_by_id):
            if self.publish(plan, report, ctx):
                self.cleanup(report)

        report.summary = _summarize(report)
        return report

    def transfer(
        self,
        plan: SyncPlan,
        report: ExecutionReport,
        ctx: ApplyContext,
        ops_by_id: dict[str, PlanOperation],
    ) -> bool:
        """Run the TRANSFER stage. Returns False if the run was stopped."""
        for op_id in plan.apply_order:
            op = ops_by_id[op_id]
            try:
                op.validate_required_fields()
            except ValueError as exc:
                raise InvalidArgumentError(
                    "Invalid operation: missing required fields",
                    details={"op_id": op.op_id, "action": op.action.value},
                    cause=exc,
                ) from exc

            if op.action not in EXECUTABLE_ACTIONS:
                raise InvalidArgumentError(
                    "Operation is not executable",
                    details={"op_id": op.op_id, "action": op.action.value},
                )

            try:
                if op.action in TRANSFER_ACTIONS:
                    result = self._copy_one(op, plan, report, ctx)
                else:
                    result = self._remove_one(op, plan, report, ctx)
            except TransferError as exc:
                logger.error("%s failed! Error: %s", op.package, exc)
                report.results.append(_failed_result(op, exc))
                report.stopped_op_id = op.op_id
                report.status = "failed"
                report.error_message = str(exc)
                return False

            report.results.append(result)

        report.stages.append(Stage.TRANSFER)
        return True

    def publish(self, plan: SyncPlan, report: ExecutionReport, ctx: ApplyContext) -> bool:
        """Run the INDEX stage. Returns False if the run was stopped."""
        _require_stage(report, Stage.TRANSFER)

        final = plan.destination.with_changes(ctx.written, ctx.removed)
        logger.info("Generating and uploading %s...", INDEX_NAME)
        try:
            report.index_url = publish_index(
                self._destination_controller, self._destination, build_index(final)
            )
        except TransferError as exc:
            logger.error("Failed to publish %s! Error: %s", INDEX_NAME, exc)
            report.status = "failed"
            report.error_message = str(exc)
            return False

        report.index_published = True
        report.stages.append(Stage.INDEX)
        return True

    def cleanup(self, report: ExecutionReport) -> None:
        """Run the CLEANUP stage: remove queued artifacts, one by one."""
        _require_stage(report, Stage.INDEX)

        loc = self._destination
        if report.queued_removals:
            logger.info("Removing files queued for deletion from destination:")
        for key in report.queued_removals:
            try:
                self._destination_controller.remove(loc.bucket, loc.prefix, key)
            except RepoSyncError as exc:
                failure = RemovalError(
                    f"Failed to remove '{key}': {exc}",
                    details={"bucket": loc.bucket, "key": loc.prefix + key},
                    cause=exc,
                )
                logger.error("  - %s", failure)
                report.removal_failures[key] = str(failure)
                continue
            logger.info("  - removed '%s'.", key)
            report.removed_artifacts.append(key)

        report.stages.append(Stage.CLEANUP)

    # ----------------------------
    # Internals
    # ----------------------------
    def _fetch_manifests(
        self,
        location: RepoLocation,
        controller: S3Controller,
        *,
        origin: str,
    ) -> ManifestSet:
        logger.info("Fetching %s's manifests from %s...", origin, location.describe())
        try:
            keys = controller.list_keys(location.bucket, location.prefix, MANIFEST_SUFFIX)
        except RepoSyncError as exc:
            raise FetchError(
                f"Failed to list manifests in {location.describe()}: {exc}",
                details={"location": location.describe()},
                cause=exc,
            ) from exc

        def _fetch(key: str) -> ManifestRecord:
            try:
                obj = controller.get(location.bucket, location.prefix, key)
            except RepoSyncError as exc:
                raise FetchError(
                    f"Failed to fetch manifest '{key}' from {location.describe()}: {exc}",
                    details={"location": location.describe(), "key": key},
                    cause=exc,
                ) from exc
            return parse_manifest(obj, origin=origin)

        if self._max_workers > 1 and len(keys) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                records = list(pool.map(_fetch, keys))
        else:
            records = [_fetch(key) for key in keys]

        logger.info("Fetched %d manifests from %s.", len(records), location.describe())
        return ManifestSet.from_records(location, records)

    def _copy_one(
        self,
        op: PlanOperation,
        plan: SyncPlan,
        report: ExecutionReport,
        ctx: ApplyContext,
    ) -> OperationResult:
        record = _record_for(plan.source, op)
        src = self._source
        dst = self._destination
        logger.info("Copying %s:", op.package)

        key = extract_key(record.dist_url, src.bucket, src.region, src.prefix)
        if key is not None:
            logger.info("  - copying '%s'...", key)
            try:
                self._destination_controller.copy(
                    src.bucket, src.prefix, key, dst.bucket, dst.prefix
                )
            except RepoSyncError as exc:
                raise TransferError(
                    f"Failed to copy '{key}' for {op.package}: {exc}",
                    details={"package": op.package, "key": key},
                    cause=exc,
                ) from exc
            report.copied_keys.append(key)
            data = record.with_dist_url(rewrite_url(key, dst.bucket, dst.region, dst.prefix))
            body = dump_manifest(data)
        else:
            # dist.url points outside the source repository; leave it alone
            warning = f"not copying '{record.dist_url}' for {op.package} (in manifest 'dist.url')"
            logger.warning("  - WARNING: %s", warning)
            report.warnings.append(warning)
            data = record.data
            body = record.raw

        logger.info("  - copying manifest file '%s'...", record.key)
        try:
            self._destination_controller.put(
                dst.bucket, dst.prefix, record.key, body, JSON_CONTENT_TYPE
            )
        except RepoSyncError as exc:
            raise TransferError(
                f"Failed to write manifest '{record.key}': {exc}",
                details={"package": op.package, "key": record.key},
                cause=exc,
            ) from exc

        ctx.written[op.package] = dataclasses.replace(record, data=data, raw=body)
        report.written_manifests.append(op.package)
        return _success_result(op, artifact_key=key, url_rewritten=key is not None)

    def _remove_one(
        self,
        op: PlanOperation,
        plan: SyncPlan,
        report: ExecutionReport,
        ctx: ApplyContext,
    ) -> OperationResult:
        record = _record_for(plan.destination, op)
        dst = self._destination
        logger.info("Removing %s:", op.package)

        key = extract_key(record.dist_url, dst.bucket, dst.region, dst.prefix)
        if key is None:
            warning = f"not removing '{record.dist_url}' for {op.package} (in manifest 'dist.url')"
            logger.warning("  - WARNING: %s", warning)
            report.warnings.append(warning)
        elif key in report.copied_keys:
            notice = f"keeping newly copied '{key}' (referenced by removed {op.package})"
            logger.info("  - NOTICE: %s", notice)
            report.warnings.append(notice)
        elif key not in report.queued_removals:
            logger.info("  - queued '%s' for removal.", key)
            report.queued_removals.append(key)

        logger.info("  - removing manifest file '%s'...", record.key)
        try:
            self._destination_controller.remove(dst.bucket, dst.prefix, record.key)
        except RepoSyncError as exc:
            raise TransferError(
                f"Failed to remove manifest '{record.key}': {exc}",
                details={"package": op.package, "key": record.key},
                cause=exc,
            ) from exc

        ctx.removed.append(op.package)
        report.removed_manifests.append(op.package)
        return _success_result(op, artifact_key=key)


def _record_for(manifests: ManifestSet, op: PlanOperation) -> ManifestRecord:
    record = manifests.find(op.package)
    if record is None:
        raise InvalidStateError(
            "Plan refers to a package missing from its manifest set",
            details={"op_id": op.op_id, "package": op.package},
        )
    return record


def _require_stage(report: ExecutionReport, stage: Stage) -> None:
    if stage not in report.stages:
        raise InvalidStateError(
            f"Stage {stage.value} has not completed",
            details={"completed": [s.value for s in report.stages]},
        )


def _index_operations(operations: tuple[PlanOperation, ...]) -> dict[str, PlanOperation]:
    ops_by_id: dict[str, PlanOperation] = {}
    for op in operations:
        if op.op_id in ops_by_id:
            raise InvalidArgumentError("Duplicate op_id in plan", details={"op_id": op.op_id})
        ops_by_id[op.op_id] = op
    return ops_by_id


def _validate_apply_order(apply_order: tuple[str, ...], ops_by_id: dict[str, PlanOperation]) -> None:
    for op_id in apply_order:
        if op_id not in ops_by_id:
            raise InvalidArgumentError(
                "apply_order contains unknown op_id",
                details={"op_id": op_id},
            )


def _success_result(
    op: PlanOperation,
    *,
    artifact_key: Optional[str] = None,
    url_rewritten: bool = False,
) -> OperationResult:
    return OperationResult(
        op_id=op.op_id,
        seq=op.seq,
        action=op.action.value,
        package=op.package,
        status="success",
        artifact_key=artifact_key,
        url_rewritten=url_rewritten,
    )


def _failed_result(op: PlanOperation, exc: RepoSyncError) -> OperationResult:
    return OperationResult(
        op_id=op.op_id,
        seq=op.seq,
        action=op.action.value,
        package=op.package,
        status="failed",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        error_details=getattr(exc, "details", None),
    )


def _summarize(report: ExecutionReport) -> dict[str, int]:
    summary: dict[str, int] = {"success": 0, "failed": 0, "skipped": 0}
    for r in report.results:
        summary[r.status] = summary.get(r.status, 0) + 1
    summary["warnings"] = len(report.warnings)
    summary["artifacts_copied"] = len(report.copied_keys)
    summary["artifacts_removed"] = len(report.removed_artifacts)
    summary["removal_failed"] = len(report.removal_failures)
    return summary
