"""
Group update ingress. Requests are accepted for asynchronous processing and
acknowledged immediately; the outcome is only visible in the logs.
"""

from fastapi import APIRouter

from groupsync.api.dependencies import LoggerDependency, UpdaterDependency
from groupsync.service.updater import BulkUpdate, GroupUpdate, SingleUpdate

update_app = APIRouter(tags=["Group Updates"])


@update_app.post(
    "",
    summary="Update the groups of a single user",
    description=(
        "Replace the groups of the given user. The update is queued and "
        "applied in the background; a 200 only means it was accepted."
    ),
    responses={
        200: {"description": "Update accepted."},
    },
)
async def update_profile(
    content: GroupUpdate,
    updater: UpdaterDependency,
    log: LoggerDependency,
) -> dict:
    await log.adebug("update.single.received", user_id=content.user_id)
    updater.enqueue(SingleUpdate(update=content))
    return {}


@update_app.post(
    "/bulk",
    summary="Update the groups of many users",
    description=(
        "Replace the groups of each of the given users, in order. The batch is "
        "queued as one message and applied in the background."
    ),
    responses={
        200: {"description": "Updates accepted."},
    },
)
async def update_profiles(
    content: list[GroupUpdate],
    updater: UpdaterDependency,
    log: LoggerDependency,
) -> dict:
    await log.adebug("update.bulk.received", number_of_updates=len(content))
    updater.enqueue(BulkUpdate(updates=tuple(content)))
    return {}
