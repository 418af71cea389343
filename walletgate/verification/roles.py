"""Grants the verified role to a requester."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from walletgate.exceptions import RoleNotConfigured

if TYPE_CHECKING:
    from walletgate.gateway.base import CommunityGateway

logger = structlog.get_logger(__name__)


class RoleGrantor:
    """Looks up the privileged role by name and assigns it idempotently."""

    def __init__(self, gateway: CommunityGateway, role_name: str) -> None:
        self._gateway = gateway
        self._role_name = role_name

    async def _role_id(self) -> str:
        role_id = await self._gateway.find_role_id(self._role_name)
        if role_id is None:
            logger.error("role_not_configured", role_name=self._role_name)
            raise RoleNotConfigured
        return role_id

    async def has_role(self, requester_id: str) -> bool:
        """True if the requester already holds the role (False if it does not exist)."""
        role_id = await self._gateway.find_role_id(self._role_name)
        if role_id is None:
            return False
        return role_id in await self._gateway.member_role_ids(requester_id)

    async def grant(self, requester_id: str) -> bool:
        """Give the role to the requester. Returns False if it was already held."""
        role_id = await self._role_id()
        if role_id in await self._gateway.member_role_ids(requester_id):
            logger.info("role_already_held", requester_id=requester_id, role_name=self._role_name)
            return False
        await self._gateway.add_member_role(requester_id, role_id)
        logger.info("role_granted", requester_id=requester_id, role_name=self._role_name)
        return True
