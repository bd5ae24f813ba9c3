from functools import lru_cache
from typing import Optional

import tiktoken

from docqa.config import settings


@lru_cache(maxsize=8)
def get_encoding(model: str):
    """Tokenizer for model, cl100k_base when tiktoken does not know the model."""
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str, model: Optional[str] = None) -> int:
    if not text:
        return 0
    return len(get_encoding(model or settings.chat_model).encode(text))
