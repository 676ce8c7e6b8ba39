from duelvault.models.card import ArtworkInfo, CardRecord, CardSetInfo, IdentifiedCard
from duelvault.models.deck import Deck, DeckSection
from duelvault.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    CapacityError,
    CopyLimitError,
    FailureDetail,
    FailureKind,
    InUseError,
    InvalidInputError,
    KnownError,
    MalformedRecordError,
    NoCopiesAvailableError,
    NotFoundError,
    OutcomeType,
    Result,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from duelvault.models.library import CollectionStore
from duelvault.models.lookup import ApiCardImage, ApiCardSet, CardLookupResult
from duelvault.models.rarity import FALLBACK_RARITY, RARITIES, normalize_rarity, rarity_rank

__all__ = [
    "ApiCardImage",
    "ApiCardSet",
    "ApiResponse",
    "ArtworkInfo",
    "CapacityError",
    "CardLookupResult",
    "CardRecord",
    "CardSetInfo",
    "CollectionStore",
    "CopyLimitError",
    "Deck",
    "DeckSection",
    "FALLBACK_RARITY",
    "FailureDetail",
    "FailureKind",
    "IdentifiedCard",
    "InUseError",
    "InvalidInputError",
    "KnownError",
    "MalformedRecordError",
    "NoCopiesAvailableError",
    "NotFoundError",
    "OutcomeType",
    "RARITIES",
    "Result",
    "STANDARD_MESSAGES",
    "STANDARD_SUGGESTIONS",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
    "normalize_rarity",
    "rarity_rank",
]
