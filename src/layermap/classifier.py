"""
Layer classification for table names and header tokens.
"""

from .models import Layer
from .vocabulary import DEFAULT_VOCABULARY, ParserVocabulary


def classify_layer(name: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY) -> Layer:
    """
    Map a free-text table name to its architectural layer.

    Pure and total. A name is in a layer when it starts with the bare token
    ("cdp_orders"), contains the underscored token ("sales_cdp_daily") or
    contains the long keyword ("consumption_revenue"). Consumption markers are
    checked before foundational ones; anything else is origination.

    Args:
        name: Table name or any free-text token
        vocabulary: Marker configuration

    Returns:
        The classified Layer

    Example:
        >>> classify_layer("cdp_orders")
        <Layer.CONSUMPTION: 'CDP (Common/Consumption)'>
        >>> classify_layer("raw_events")
        <Layer.ORIGINATION: 'ODP (Origination)'>
    """
    lower = (name or "").lower()
    for layer, prefix, infix, keyword in vocabulary.name_markers:
        if lower.startswith(prefix) or infix in lower or keyword in lower:
            return layer
    return Layer.ORIGINATION


def resolve_layer_token(token: str, vocabulary: ParserVocabulary = DEFAULT_VOCABULARY) -> Layer:
    """
    Resolve a transcript header token (ODP, RAW, FOUNDATION, ...) to its layer.

    Unknown tokens resolve to origination.
    """
    return vocabulary.layer_tokens.get(token.upper(), Layer.ORIGINATION)


__all__ = ["classify_layer", "resolve_layer_token"]
