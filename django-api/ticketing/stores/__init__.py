from ticketing.stores.interfaces import EventStore, StoreError, TicketStore

__all__ = ["EventStore", "TicketStore", "StoreError"]
