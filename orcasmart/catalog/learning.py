"""Term-learning heuristic for accepted classifications.

Picks a couple of meaningful tokens from a product name so the owner's
rule store can recognise similar products next time. This is deliberately
simple: long-enough tokens, no stopwords, no numbers, at most a few per
event.
"""

import re

from orcasmart.catalog.normalizer import normalize
from orcasmart.config import settings

STOPWORDS: frozenset[str] = frozenset(
    {
        # Portuguese function words
        "a", "o", "as", "os", "um", "uma", "uns", "umas",
        "de", "da", "do", "das", "dos", "em", "na", "no", "nas", "nos",
        "para", "pra", "pelo", "pela", "pelos", "pelas", "por", "com", "sem",
        "sobre", "entre", "ate", "apos", "desde", "e", "ou", "mas", "que",
        "este", "esta", "estes", "estas", "esse", "essa", "esses", "essas",
        "aquele", "aquela", "muito", "mais", "menos", "cada", "todo", "toda",
        # Catalog noise
        "tipo", "modelo", "linha", "marca", "cor", "cores", "tamanho",
        "unidade", "unidades", "peca", "pecas", "kit", "jogo", "conjunto",
        "caixa", "pacote", "rolo", "metro", "metros", "litro", "litros",
        "galao", "lata", "balde", "saco", "quilo", "quilos", "grande",
        "pequeno", "pequena", "medio", "media", "novo", "nova", "branco",
        "branca", "preto", "preta", "cinza", "original", "premium",
        "produto", "produtos", "imagem", "foto", "copia",
    }
)

_TOKEN_SPLIT = re.compile(r"[\s-]+")
_HAS_DIGIT = re.compile(r"\d")


def extract_learnable_terms(
    text: str | None,
    *,
    max_terms: int | None = None,
    min_length: int | None = None,
) -> list[str]:
    """Pick up to ``max_terms`` learnable tokens from ``text``.

    Tokens are taken from the normalized text in order of appearance and
    must be at least ``min_length`` characters long, contain no digits and
    not be stopwords. Duplicates are dropped.

    Example:
        >>> extract_learnable_terms("Tinta Acrílica Fosca 18L Branca")
        ['tinta', 'acrilica']
    """
    max_terms = settings.learn_max_terms_per_event if max_terms is None else max_terms
    min_length = settings.learn_min_term_length if min_length is None else min_length

    picked: list[str] = []
    for token in _TOKEN_SPLIT.split(normalize(text)):
        if len(picked) >= max_terms:
            break
        if len(token) < min_length or token in STOPWORDS or _HAS_DIGIT.search(token):
            continue
        if token not in picked:
            picked.append(token)
    return picked
