"""
The asynchronous update pipeline.

Producers (HTTP handlers, or anything else) hold an `UpdaterClient` and only
ever enqueue; they never wait for the result. A single `Updater` drains the
bounded queue sequentially, fetching each profile, merging the new groups in
and publishing the signed result. Failures are isolated to the request that
caused them and are only visible in the logs.

The queue is a `queue.Queue`, so handles can be shared freely between threads
without any further locking. When the queue is full, new messages are dropped
with a warning rather than blocking the producer.
"""

import asyncio
import queue
import threading

from pydantic import BaseModel, ConfigDict
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from groupsync.core.groups import update_groups
from groupsync.core.signer import SigningFailed

from .store import FetchFailed, GetBy, ProfileStoreClient, PublishFailed, UpdateError


class EnqueueDropped(UpdateError):
    pass


class GroupUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    groups: frozenset[str]


class SingleUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    update: GroupUpdate


class BulkUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    updates: tuple[GroupUpdate, ...]


class Stop(BaseModel):
    model_config = ConfigDict(frozen=True)


UpdateMessage = SingleUpdate | BulkUpdate | Stop


async def update(
    store: ProfileStoreClient,
    group_update: GroupUpdate,
    log: FilteringBoundLogger,
) -> bool:
    """
    Fetch the profile for `group_update.user_id`, replace its groups, and
    publish the signed result.

    Parameters
    ----------
    store: ProfileStoreClient
        The profile store to read from and publish to.
    group_update: GroupUpdate
        The user and the full set of groups they should be in.
    log: FilteringBoundLogger
        Logger instance.

    Returns
    -------
    bool
        Whether the request was processed. Any error is logged and does not
        count as unprocessed, so this is currently always True.
    """
    user_id = group_update.user_id
    log = log.bind(user_id=user_id, number_of_groups=len(group_update.groups))

    try:
        profile = await store.get_user_by(user_id, GetBy.USER_ID, None)
        await log.ainfo("updater.update.updating_groups")
        updated_profile = update_groups(
            profile, group_update.groups, store.get_secret_store()
        )
        await log.adebug("updater.update.sending_groups")
        await store.update_user(user_id, updated_profile)
    except FetchFailed as e:
        await log.awarning("updater.update.fetch_failed", error=str(e))
    except SigningFailed as e:
        await log.awarning("updater.update.signing_failed", error=str(e))
    except PublishFailed as e:
        await log.awarning("updater.update.publish_failed", error=str(e))
    except Exception:
        await log.aexception("updater.update.failed")
    else:
        await log.ainfo("updater.update.updated")

    return True


async def update_batch(
    store: ProfileStoreClient,
    updates: tuple[GroupUpdate, ...] | list[GroupUpdate],
    log: FilteringBoundLogger,
) -> int:
    """
    Process `updates` strictly in order, one at a time. Returns the number of
    updates processed.
    """
    total = len(updates)
    log = log.bind(number_of_updates=total)
    await log.ainfo("updater.bulk.start")

    processed = 0

    for group_update in updates:
        if not await update(store, group_update, log):
            # Unreachable while `update` always reports the request processed.
            await log.ainfo("updater.bulk.stopping", processed=processed)
            break

        processed += 1
        await log.adebug("updater.bulk.progress", processed=processed)

    await log.ainfo("updater.bulk.done", processed=processed, total=total)

    return processed


class UpdaterClient:
    """
    A handle for enqueueing messages to an `Updater`. Cheap to clone and safe
    to use from any thread. Never blocks: messages that do not fit in the
    queue are dropped with a warning.
    """

    queue: queue.Queue
    log: FilteringBoundLogger

    def __init__(self, queue: queue.Queue, log: FilteringBoundLogger):
        self.queue = queue
        self.log = log

    def clone(self) -> "UpdaterClient":
        return UpdaterClient(queue=self.queue, log=self.log)

    def _send(self, message: UpdateMessage) -> None:
        try:
            self.queue.put_nowait(message)
        except (queue.Full, queue.ShutDown) as e:
            error = EnqueueDropped(
                f"Dropped {type(message).__name__} message: "
                f"{'queue shut down' if isinstance(e, queue.ShutDown) else 'queue full'}"
            )
            self.log.warning(
                "updater.enqueue_dropped",
                message_type=type(message).__name__,
                error=str(error),
            )

    def enqueue(self, message: UpdateMessage) -> None:
        self._send(message)

    def request_stop(self) -> None:
        self._send(Stop())


class Updater:
    """
    Owns the receiving end of the update queue. Expected usage:

    updater = Updater(store)
    client = updater.client()

    thread = start_updater_thread(updater)
    client.enqueue(SingleUpdate(update=GroupUpdate(user_id=..., groups=...)))
    ...
    client.request_stop()
    thread.join()
    """

    store: ProfileStoreClient
    queue: queue.Queue
    log: FilteringBoundLogger

    def __init__(
        self,
        store: ProfileStoreClient,
        queue_size: int = 100,
        log: FilteringBoundLogger | None = None,
    ):
        self.store = store
        self.queue = queue.Queue(maxsize=queue_size)
        self.log = log or get_logger()

    def client(self) -> UpdaterClient:
        return UpdaterClient(queue=self.queue, log=self.log)

    def close(self) -> None:
        """
        Shut the queue down without a `Stop` message. Messages already queued
        are still processed, after which `run` returns.
        """
        self.queue.shutdown()

    async def receive(self) -> UpdateMessage | None:
        try:
            return await asyncio.to_thread(self.queue.get)
        except queue.ShutDown:
            return None

    async def run(self) -> int:
        """
        Process messages until a `Stop` arrives or the queue is shut down.
        Returns the number of messages processed.
        """
        log = self.log.bind(queue_size=self.queue.maxsize)
        await log.ainfo("updater.started")

        processed = 0

        while True:
            message = await self.receive()

            match message:
                case SingleUpdate(update=group_update):
                    await update(self.store, group_update, log)
                case BulkUpdate(updates=updates):
                    await update_batch(self.store, updates, log)
                case Stop():
                    await log.ainfo("updater.stopping", processed=processed)
                    break
                case None:
                    await log.awarning("updater.queue_closed", processed=processed)
                    break
                case _:
                    await log.awarning(
                        "updater.unknown_message", message_type=type(message).__name__
                    )
                    continue

            processed += 1
            await log.ainfo("updater.processed", processed=processed)

        # Anything sent after this point is dropped at the handle.
        self.queue.shutdown()

        return processed


def start_updater_thread(updater: Updater) -> threading.Thread:
    """
    Run `updater` on its own event loop in a dedicated thread.
    """
    thread = threading.Thread(
        target=lambda: asyncio.run(updater.run()), name="updater", daemon=True
    )
    thread.start()

    return thread
