from aftercare_engine.stores.json_files import JsonAnchorRecordStore, JsonTaskStore
from aftercare_engine.stores.memory import InMemoryAnchorRecordStore, InMemoryTaskStore

__all__ = ["InMemoryAnchorRecordStore", "InMemoryTaskStore", "JsonAnchorRecordStore", "JsonTaskStore"]
