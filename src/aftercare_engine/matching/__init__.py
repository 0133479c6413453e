from aftercare_engine.matching.matcher import AddressMatcher
from aftercare_engine.matching.normalize import extract_parts, extract_suburb, normalize_address
from aftercare_engine.matching.scoring import confidence_for, levenshtein, score_addresses, similarity

__all__ = [
    "AddressMatcher",
    "confidence_for",
    "extract_parts",
    "extract_suburb",
    "levenshtein",
    "normalize_address",
    "score_addresses",
    "similarity",
]
