"""Partner-owned menu items and the customer-facing catalogue."""

from __future__ import annotations

import logging
from typing import Any

from src.domain.authorization import MENU_OWNERS, ensure_owner
from src.domain.entities import Identity, coerce_number
from src.domain.errors import BadRequest, NotFound
from src.infrastructure.models import MenuItemModel, PartnerModel
from src.infrastructure.repositories import Store

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "price", "description", "category")


class MenuService:
    def __init__(self, store: Store):
        self.store = store

    async def create(self, partner: Identity, fields: dict[str, Any]) -> MenuItemModel:
        name = (fields.get("name") or "").strip()
        if not name:
            raise BadRequest("name is required")
        item = await self.store.menu_items.insert(
            partner_id=partner.subject_id,
            name=name,
            price=coerce_number(fields.get("price")),
            description=fields.get("description"),
            category=fields.get("category"),
        )
        logger.info("Partner #%d added menu item #%d", partner.subject_id, item.id)
        return item

    async def list_own(self, partner: Identity) -> list[MenuItemModel]:
        return await self.store.menu_items.for_partner(partner.subject_id)

    async def _owned(self, partner: Identity, menu_id: int) -> MenuItemModel:
        item = await self.store.menu_items.get(menu_id)
        if item is None:
            raise NotFound("Menu item not found")
        ensure_owner(partner, item, MENU_OWNERS)
        return item

    async def update(
        self, partner: Identity, menu_id: int, changes: dict[str, Any]
    ) -> MenuItemModel:
        item = await self._owned(partner, menu_id)
        values = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
        if "price" in values:
            values["price"] = coerce_number(values["price"])
        if "name" in values and not (values["name"] or "").strip():
            raise BadRequest("name cannot be empty")
        return await self.store.menu_items.update(item, **values)

    async def delete(self, partner: Identity, menu_id: int) -> None:
        item = await self._owned(partner, menu_id)
        await self.store.menu_items.delete(item)
        logger.info("Partner #%d deleted menu item #%d", partner.subject_id, menu_id)

    # ── Customer-facing catalogue ─────────────────────────────────

    async def list_partners(self) -> list[PartnerModel]:
        return await self.store.partners.find()

    async def partner_menu(self, partner_id: int) -> list[MenuItemModel]:
        if await self.store.partners.get(partner_id) is None:
            raise NotFound("Partner not found")
        return await self.store.menu_items.for_partner(partner_id)
