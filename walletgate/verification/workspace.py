"""Ephemeral private channels for verification attempts."""

from __future__ import annotations

import asyncio
import contextlib
import re
from typing import TYPE_CHECKING

import structlog

from walletgate.exceptions import GatewayError, WorkspaceCreateFailed
from walletgate.models.domain import WorkspaceHandle

if TYPE_CHECKING:
    from walletgate.gateway.base import CommunityGateway
    from walletgate.state.challenge_store import InMemoryChallengeStore

logger = structlog.get_logger(__name__)

WORKSPACE_PREFIX = "verify-"
_MAX_SLUG_LEN = 90
_SLUG_RE = re.compile(r"[^a-z0-9_-]+")


def workspace_name(display_name: str, requester_id: str) -> str:
    """Derive the channel name for a requester's workspace."""
    slug = _SLUG_RE.sub("-", display_name.lower()).strip("-")
    slug = slug[:_MAX_SLUG_LEN].rstrip("-")
    return f"{WORKSPACE_PREFIX}{slug or requester_id}"


class WorkspaceManager:
    """Opens, tracks and tears down one private channel per requester.

    Each open workspace has at most one pending teardown task. Scheduling a
    new teardown cancels the previous one, and a teardown that fires for a
    workspace no longer tracked does nothing.
    """

    def __init__(self, gateway: CommunityGateway, challenges: InMemoryChallengeStore) -> None:
        self._gateway = gateway
        self._challenges = challenges
        self._workspaces: dict[str, WorkspaceHandle] = {}  # requester_id -> handle
        self._teardowns: dict[str, asyncio.Task[None]] = {}  # channel_id -> task

    def get(self, requester_id: str) -> WorkspaceHandle | None:
        return self._workspaces.get(requester_id)

    def pending_teardown(self, handle: WorkspaceHandle) -> asyncio.Task[None] | None:
        return self._teardowns.get(handle.channel_id)

    async def open(self, requester_id: str, display_name: str) -> WorkspaceHandle:
        """Create a workspace and make it the requester's current one."""
        handle = await self.create(requester_id, display_name)
        await self.activate(handle)
        return handle

    async def create(self, requester_id: str, display_name: str) -> WorkspaceHandle:
        """Create a channel visible only to the requester and the bot.

        The channel is not tracked until ``activate``; any current workspace
        for the requester is left untouched.
        """
        name = workspace_name(display_name, requester_id)
        try:
            channel_id = await self._gateway.create_private_channel(name, requester_id)
        except GatewayError as exc:
            logger.error(
                "workspace_create_failed",
                requester_id=requester_id,
                name=name,
                status=exc.status_code,
                error=str(exc),
            )
            raise WorkspaceCreateFailed from exc

        logger.info("workspace_opened", requester_id=requester_id, channel_id=channel_id, name=name)
        return WorkspaceHandle(requester_id=requester_id, channel_id=channel_id, name=name)

    async def activate(self, handle: WorkspaceHandle) -> None:
        """Track ``handle`` as the requester's workspace, closing the one it replaces."""
        previous = self._workspaces.get(handle.requester_id)
        self._workspaces[handle.requester_id] = handle
        if previous is not None and previous != handle:
            logger.info(
                "workspace_replaced",
                requester_id=handle.requester_id,
                channel_id=previous.channel_id,
                replacement=handle.channel_id,
            )
            await self.close(previous)

    async def close(self, handle: WorkspaceHandle) -> None:
        """Delete the workspace channel. Safe to call more than once."""
        self._cancel_teardown(handle.channel_id)
        if self._workspaces.get(handle.requester_id) == handle:
            del self._workspaces[handle.requester_id]
        try:
            await self._gateway.delete_channel(handle.channel_id)
        except GatewayError as exc:
            logger.warning(
                "workspace_delete_failed",
                requester_id=handle.requester_id,
                channel_id=handle.channel_id,
                error=str(exc),
            )
            return
        logger.info("workspace_closed", requester_id=handle.requester_id, channel_id=handle.channel_id)

    async def post(self, handle: WorkspaceHandle, content: str) -> None:
        """Send a message into the workspace channel."""
        await self._gateway.send_message(handle.channel_id, content)

    def schedule_close(
        self, handle: WorkspaceHandle, delay: float, expire_challenge: bool = False
    ) -> asyncio.Task[None]:
        """Close ``handle`` after ``delay`` seconds, replacing any pending teardown.

        With ``expire_challenge`` the requester's challenge is cleared first.
        """
        self._cancel_teardown(handle.channel_id)
        task = asyncio.create_task(
            self._teardown_after(handle, delay, expire_challenge),
            name=f"teardown-{handle.channel_id}",
        )
        self._teardowns[handle.channel_id] = task

        def _forget(done: asyncio.Task[None]) -> None:
            if self._teardowns.get(handle.channel_id) is done:
                del self._teardowns[handle.channel_id]

        task.add_done_callback(_forget)
        return task

    async def _teardown_after(
        self, handle: WorkspaceHandle, delay: float, expire_challenge: bool
    ) -> None:
        await asyncio.sleep(delay)
        if self._workspaces.get(handle.requester_id) != handle:
            logger.debug("workspace_teardown_stale", channel_id=handle.channel_id)
            return
        if expire_challenge and self._challenges.get(handle.requester_id) is not None:
            self._challenges.clear(handle.requester_id)
            logger.info("challenge_expired", requester_id=handle.requester_id)
        await self.close(handle)

    def _cancel_teardown(self, channel_id: str) -> None:
        task = self._teardowns.pop(channel_id, None)
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    async def shutdown(self) -> None:
        """Cancel every pending teardown. Channels are left as they are."""
        tasks = list(self._teardowns.values())
        self._teardowns.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            logger.info("workspace_teardowns_cancelled", count=len(tasks))
