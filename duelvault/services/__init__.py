"""
DuelVault services.

Business logic for collection reconciliation and deck building.
"""

from duelvault.services.allocation import available_for, card_usage, set_quantity
from duelvault.services.artwork_preferences import (
    default_artwork,
    get_artwork_preference,
    save_artwork_preference,
)
from duelvault.services.card_identity import (
    ArtworkChange,
    IncomingCard,
    change_artwork,
    resolve_identity,
    upsert_card,
)
from duelvault.services.card_lookup import (
    LookupOutcome,
    collect_artworks,
    identify_card,
    pad_card_code,
)
from duelvault.services.collection_export import (
    export_backup,
    export_csv,
    import_csv,
    restore_backup,
)
from duelvault.services.collection_migrator import (
    MigrationResult,
    migrate_collection,
    migrate_collection_with_report,
    migrate_decks,
    migrate_library,
)
from duelvault.services.collection_search import (
    get_collection_summary,
    search_collection,
    sort_collection,
)
from duelvault.services.deck_editor import (
    DeckEditingSession,
    EditorBusyError,
    EditorState,
    EditorStateError,
    add_card_to_deck,
    compute_availability,
    create_deck,
    deck_warnings,
    delete_deck,
    is_extra_deck_card,
    rebuild_deck,
    remove_card_from_deck,
    save_deck,
)
from duelvault.services.type_classifier import (
    EFFECT_TAG,
    NON_EFFECT_TAG,
    TypeClassification,
    classify_type,
    is_extra_deck_type,
    is_monster_tags,
)

__all__ = [
    # Classification
    "EFFECT_TAG",
    "NON_EFFECT_TAG",
    "TypeClassification",
    "classify_type",
    "is_extra_deck_type",
    "is_monster_tags",
    # Migration
    "MigrationResult",
    "migrate_collection",
    "migrate_collection_with_report",
    "migrate_decks",
    "migrate_library",
    # Identity & merge
    "ArtworkChange",
    "IncomingCard",
    "change_artwork",
    "resolve_identity",
    "upsert_card",
    # Allocation
    "available_for",
    "card_usage",
    "set_quantity",
    # Decks
    "DeckEditingSession",
    "EditorBusyError",
    "EditorState",
    "EditorStateError",
    "add_card_to_deck",
    "compute_availability",
    "create_deck",
    "deck_warnings",
    "delete_deck",
    "is_extra_deck_card",
    "rebuild_deck",
    "remove_card_from_deck",
    "save_deck",
    # Lookup & artwork
    "LookupOutcome",
    "collect_artworks",
    "default_artwork",
    "get_artwork_preference",
    "identify_card",
    "pad_card_code",
    "save_artwork_preference",
    # Search & export
    "export_backup",
    "export_csv",
    "get_collection_summary",
    "import_csv",
    "restore_backup",
    "search_collection",
    "sort_collection",
]
