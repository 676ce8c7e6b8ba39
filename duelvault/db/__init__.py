from duelvault.db.database import get_session, init_db
from duelvault.db.operations import (
    delete_library,
    get_library,
    library_to_store,
    load_library,
    save_library,
)

__all__ = [
    "delete_library",
    "get_library",
    "get_session",
    "init_db",
    "library_to_store",
    "load_library",
    "save_library",
]
