"""
Provisioning Engine.

Turns registry definitions into durable store records.

Identities:
- Upserted by email without locking (upserts are idempotent and commute)
- Best effort: each failure is logged and recorded, the batch continues

Groups, one state machine per group:
    Locked -> Precheck -> Creating -> Verifying(storage) -> Verifying(consumer) -> Done
- Lock "owner-{owner_id}" serializes creation per owner across workers
- Precheck short-circuits when the owner already has a membership
- Creating retries store errors with linear backoff
- Both verification paths retry with exponential backoff plus jitter
- The lock is released on every exit once acquired
"""

import logging
import random
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from tfp.config import LockConfig, RetryConfig, current_worker_id
from tfp.domain.errors import (
    GroupBatchError,
    GroupCreationError,
    ProvisioningError,
    StoreError,
    VerificationFailedError,
)
from tfp.domain.interfaces.fixture_store import IFixtureStore
from tfp.domain.interfaces.lock_manager import ILockManager
from tfp.domain.models import (
    GroupProvisioningResult,
    GroupSnapshot,
    IdentityBatchResult,
    MemberRole,
    TestGroup,
)

from .fixture_registry import FixtureRegistry

logger = logging.getLogger(__name__)

STORAGE_PATH = "storage"
CONSUMER_PATH = "consumer"


class ProvisioningEngine:
    """
    Creates registry fixtures in the store.

    Usage:
        engine = ProvisioningEngine(store, FileLockManager("/tmp/test-locks"))
        engine.create_identities(registry)
        result = engine.create_group(registry, "team")
    """

    def __init__(
        self,
        store: IFixtureStore,
        lock_manager: ILockManager,
        retry: Optional[RetryConfig] = None,
        lock_config: Optional[LockConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
        worker_id: Optional[str] = None,
    ):
        """
        Args:
            store: Storage client
            lock_manager: Lock over owner resources
            retry: Retry budgets (production defaults when omitted)
            lock_config: Acquisition wait and poll interval
            sleep: Sleep function for backoff (injectable for tests)
            rng: Random source for jitter
            worker_id: Worker label for log lines
        """
        self._store = store
        self._locks = lock_manager
        self._retry = retry or RetryConfig()
        self._lock_config = lock_config or LockConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._worker_id = worker_id or current_worker_id()

    @property
    def store(self) -> IFixtureStore:
        return self._store

    @property
    def lock_manager(self) -> ILockManager:
        return self._locks

    # ═══════════════════════════════════════════════════════════════════════════
    # Identities
    # ═══════════════════════════════════════════════════════════════════════════

    def create_identities(self, registry: FixtureRegistry) -> IdentityBatchResult:
        """
        Upsert every identity not flagged external.

        Failures never abort the batch; tests depending on a missing
        identity fail later on their own.
        """
        result = IdentityBatchResult()
        for identity in registry.identities():
            if identity.external:
                logger.info(f"Skipping external identity '{identity.key}' ({identity.email})")
                result.skipped.append(identity.key)

        for identity in registry.identities_to_create():
            try:
                self._store.upsert_identity(identity)
            except Exception as e:
                logger.warning(
                    f"Worker {self._worker_id} failed to create identity "
                    f"'{identity.key}' ({identity.email}): {e}"
                )
                result.failed[identity.key] = str(e)
                continue
            result.created.append(identity.key)

        logger.info(
            f"Worker {self._worker_id} identity batch: {len(result.created)} created, "
            f"{len(result.skipped)} skipped, {len(result.failed)} failed"
        )
        return result

    # ═══════════════════════════════════════════════════════════════════════════
    # Groups
    # ═══════════════════════════════════════════════════════════════════════════

    def create_group(self, registry: FixtureRegistry, key: str) -> GroupProvisioningResult:
        """
        Provision one group under its owner lock.

        Raises:
            NotFoundError: If the group key is undefined
            LockTimeoutError: If the owner lock stays held for max_wait
            GroupCreationError: If creation exhausts its retries
            VerificationFailedError: If a read path never shows the group
        """
        group = registry.get_group(key)
        self._locks.acquire(
            group.lock_name,
            max_wait=self._lock_config.max_wait_seconds,
            poll_interval=self._lock_config.poll_interval_seconds,
        )
        try:
            existing = self._precheck(group)
            if existing is not None:
                logger.info(
                    f"Worker {self._worker_id} skipped group '{key}': owner "
                    f"{group.owner_id} already belongs to group {existing}"
                )
                return GroupProvisioningResult(
                    key=key,
                    store_name=group.store_name,
                    owner_id=group.owner_id,
                    group_id=existing,
                    skipped=True,
                )

            group_id, attempts = self._create_with_retry(group)
            self._verify(group, STORAGE_PATH, lambda: self._visible_in_storage(group, group_id))
            self._verify(group, CONSUMER_PATH, lambda: self._visible_to_consumer(group, group_id))
            self._settle()

            logger.info(
                f"Worker {self._worker_id} provisioned group '{key}' ({group.store_name}) "
                f"with {len(group.expected_roles())} members"
            )
            return GroupProvisioningResult(
                key=key,
                store_name=group.store_name,
                owner_id=group.owner_id,
                group_id=group_id,
                attempts=attempts,
            )
        finally:
            self._locks.release(group.lock_name)

    def create_groups(
        self,
        registry: FixtureRegistry,
        keys: Optional[Iterable[str]] = None,
    ) -> List[GroupProvisioningResult]:
        """
        Provision several groups independently.

        Every group is attempted; one group's failure does not stop its
        siblings.

        Raises:
            GroupBatchError: After the batch, if any group failed
        """
        if keys is None:
            keys = [g.key for g in registry.groups()]

        results: List[GroupProvisioningResult] = []
        failures: Dict[str, Exception] = {}
        for key in keys:
            try:
                results.append(self.create_group(registry, key))
            except ProvisioningError as e:
                logger.error(f"Worker {self._worker_id} failed to provision group '{key}': {e}")
                failures[key] = e

        if failures:
            raise GroupBatchError(failures)
        return results

    def group_of(self, identity_id: str) -> Optional[GroupSnapshot]:
        """Group the identity belongs to, read the way consumers read it."""
        memberships = self._store.get_identity_memberships(identity_id)
        if not memberships:
            return None
        return self._store.get_group(memberships[0].group_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # States
    # ═══════════════════════════════════════════════════════════════════════════

    def _precheck(self, group: TestGroup) -> Optional[str]:
        """Group id of the owner's existing membership, if any."""
        policy = self._retry.creation
        for attempt in range(1, policy.max_attempts + 1):
            try:
                record = self._store.find_membership(group.owner_id)
                return record.group_id if record else None
            except StoreError as e:
                if attempt == policy.max_attempts:
                    raise
                logger.warning(f"Precheck for {group.owner_id} failed (attempt {attempt}): {e}")
                self._sleep(policy.delay_for(attempt, self._rng))
        return None

    def _create_with_retry(self, group: TestGroup) -> Tuple[str, int]:
        policy = self._retry.creation
        last_error: Optional[StoreError] = None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                group_id = self._store.create_group(group.store_name, group.owner_id, group.members)
                return group_id, attempt
            except StoreError as e:
                last_error = e
                logger.warning(
                    f"Worker {self._worker_id} group creation attempt {attempt}/"
                    f"{policy.max_attempts} for '{group.store_name}' failed: {e}"
                )
                if attempt < policy.max_attempts:
                    self._sleep(policy.delay_for(attempt, self._rng))

        logger.error(f"Giving up on group '{group.store_name}' for owner {group.owner_id}")
        raise GroupCreationError(
            group.store_name,
            group.owner_id,
            policy.max_attempts,
            reason=str(last_error),
        ) from last_error

    def _verify(self, group: TestGroup, path: str, visible: Callable[[], bool]) -> int:
        """Poll a read path until it shows the group. Returns the attempt that saw it."""
        policy = self._retry.verification
        last_error: Optional[StoreError] = None
        for attempt in range(1, policy.max_attempts + 1):
            try:
                if visible():
                    logger.debug(f"Group '{group.store_name}' visible on {path} path (attempt {attempt})")
                    return attempt
                logger.warning(
                    f"Group '{group.store_name}' not yet visible on {path} path "
                    f"(attempt {attempt}/{policy.max_attempts})"
                )
            except StoreError as e:
                last_error = e
                logger.warning(f"Verification read on {path} path failed (attempt {attempt}): {e}")
            if attempt < policy.max_attempts:
                self._sleep(policy.delay_for(attempt, self._rng))

        logger.error(f"Verification on {path} path failed for '{group.store_name}'")
        raise VerificationFailedError(
            path, group.store_name, group.owner_id, policy.max_attempts
        ) from last_error

    def _visible_in_storage(self, group: TestGroup, group_id: str) -> bool:
        record = self._store.find_membership(group.owner_id, group_id)
        return record is not None and record.group_id == group_id

    def _visible_to_consumer(self, group: TestGroup, group_id: str) -> bool:
        return any(
            m.group_id == group_id and m.role == MemberRole.ADMIN
            for m in self._store.get_identity_memberships(group.owner_id)
        )

    def _settle(self) -> None:
        if not self._retry.settle_enabled:
            return
        delay = self._retry.settle.delay_for(0, self._rng)
        logger.debug(f"Settling {delay:.2f}s after verification")
        self._sleep(delay)
