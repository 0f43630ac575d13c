"""Imports every ORM model so Base.metadata is complete before create_all/drop_all."""

from src.service.inventory.driven_adapter.model.ticket_type_model import TicketTypeModel
from src.service.marketplace.driven_adapter.model.listing_model import ListingModel
from src.service.marketplace.driven_adapter.model.ticket_ownership_model import (
    TicketOwnershipModel,
)
from src.service.reservation.driven_adapter.model.order_model import OrderModel


__all__ = ['ListingModel', 'OrderModel', 'TicketOwnershipModel', 'TicketTypeModel']
