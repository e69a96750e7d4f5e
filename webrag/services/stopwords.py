"""Built-in stop-word lists, exposed as an immutable language registry."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from webrag.errors import ValidationError

FRENCH_STOP_WORDS: frozenset[str] = frozenset(
    {
        # Articles
        "le", "la", "les", "un", "une", "des", "du", "de", "da", "au", "aux",
        # Prepositions
        "à", "avec", "dans", "pour", "sur", "sous", "par", "entre", "vers", "chez",
        "sans", "contre", "depuis", "pendant", "avant", "après", "devant", "derrière",
        # Conjunctions and interrogatives
        "et", "ou", "mais", "donc", "or", "ni", "car", "que", "qui", "quoi", "dont",
        "où", "quand", "comment", "pourquoi", "si", "comme", "lorsque", "puisque",
        # Pronouns and determiners
        "je", "tu", "il", "elle", "nous", "vous", "ils", "elles", "me", "te", "se",
        "lui", "leur", "ce", "cet", "cette", "ces", "mon", "ma", "mes", "ton", "ta",
        "tes", "son", "sa", "ses", "notre", "nos", "votre", "vos", "leurs",
        # Auxiliaries and common verbs
        "être", "avoir", "faire", "aller", "venir", "voir", "savoir", "pouvoir",
        "vouloir", "devoir", "falloir", "est", "sont", "était", "étaient", "sera",
        "seront", "a", "ont", "avait", "avaient", "aura", "auront", "fait", "font",
        "faisait", "faisaient", "fera", "feront", "va", "vont", "allait", "allaient",
        "ira", "iront",
        # Adverbs and quantifiers
        "très", "plus", "moins", "aussi", "encore", "déjà", "toujours", "jamais",
        "souvent", "parfois", "bien", "mal", "mieux", "beaucoup", "peu", "assez",
        "trop", "tout", "tous", "toute", "toutes", "rien", "quelque", "quelques",
        "chaque", "plusieurs", "certains", "certaines",
        # Connectives
        "alors", "ainsi", "cependant", "néanmoins", "toutefois", "pourtant",
        "notamment", "c'est-à-dire",
        # Other frequent words
        "oui", "non", "peut-être", "voici", "voilà", "ici", "là", "maintenant",
        "aujourd'hui", "hier", "demain", "année", "mois", "jour", "heure",
        "temps", "fois", "chose", "façon", "manière", "cas", "exemple",
    }
)

ENGLISH_STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "from", "up", "about", "into", "through", "during", "before",
        "after", "above", "below", "between", "among", "is", "are", "was", "were",
        "be", "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "must", "can", "this", "that",
        "these", "those", "i", "you", "he", "she", "it", "we", "they", "me", "him",
        "her", "us", "them", "my", "your", "his", "its", "our", "their",
        "what", "which", "who", "when", "where", "why", "how", "all", "any", "both",
        "each", "few", "more", "most", "other", "some", "such", "no", "nor", "not",
        "only", "own", "same", "so", "than", "too", "very", "just", "now",
    }
)

STOP_WORDS_BY_LANGUAGE: Mapping[str, frozenset[str]] = MappingProxyType(
    {
        "fr": FRENCH_STOP_WORDS,
        "en": ENGLISH_STOP_WORDS,
    }
)

LANGUAGE_SELECTIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "fr": ("fr",),
        "en": ("en",),
        "both": ("fr", "en"),
    }
)


def build_stop_words(
    language: str,
    custom_stop_words: Iterable[str] = (),
    *,
    registry: Mapping[str, frozenset[str]] = STOP_WORDS_BY_LANGUAGE,
) -> frozenset[str]:
    """Compose the active stop-word set for one extraction call."""
    selection = LANGUAGE_SELECTIONS.get(language)
    if selection is None:
        raise ValidationError(f"Unsupported stop-word language: {language!r}")

    words: set[str] = set()
    for code in selection:
        words.update(registry.get(code, frozenset()))
    words.update(word.lower() for word in custom_stop_words)
    return frozenset(words)
