# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Word-level vocabulary for the text classifier.

This wires up the HuggingFace `tokenizers` library as a "basic_english"
tokenizer: NFKC + lowercase normalization, then a split into runs of word
characters and runs of punctuation. A WordLevel model trained over the
training texts maps every word seen at least `min_frequency` times to an id;
everything else becomes <unk>.

Ids are deterministic: the specials come first (<unk> = 0, <pad> = 1) and the
rest are ordered by the trainer from the corpus counts.
"""

import logging
from pathlib import Path
from typing import Iterable

from tokenizers import Tokenizer, normalizers, pre_tokenizers
from tokenizers.models import WordLevel
from tokenizers.trainers import WordLevelTrainer

from ptexamples.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

UNK_TOKEN = "<unk>"
PAD_TOKEN = "<pad>"
SPECIAL_TOKENS = [UNK_TOKEN, PAD_TOKEN]


def _new_tokenizer() -> Tokenizer:
    tokenizer = Tokenizer(WordLevel(unk_token=UNK_TOKEN))
    tokenizer.normalizer = normalizers.Sequence([normalizers.NFKC(), normalizers.Lowercase()])
    tokenizer.pre_tokenizer = pre_tokenizers.Whitespace()
    return tokenizer


def build_vocab(
    texts: Iterable[str],
    min_frequency: int = 1,
    max_vocab_size: int = 1_000_000,
) -> Tokenizer:
    """
    Train a word-level vocabulary over `texts`.

    Args:
        texts: Training texts; consumed once.
        min_frequency: Words seen fewer times than this map to <unk>.
        max_vocab_size: Upper bound on vocabulary size, specials included.

    Returns:
        A tokenizer whose encode() yields vocabulary ids.
    """
    tokenizer = _new_tokenizer()
    trainer = WordLevelTrainer(
        vocab_size=max_vocab_size,
        min_frequency=min_frequency,
        special_tokens=list(SPECIAL_TOKENS),
        show_progress=False,
    )
    tokenizer.train_from_iterator(texts, trainer=trainer)

    logger.info(
        "Vocabulary built",
        extra={"vocab_size": tokenizer.get_vocab_size(), "min_frequency": min_frequency},
    )
    return tokenizer


def encode_batch(tokenizer: Tokenizer, texts: list[str]) -> list[list[int]]:
    """Map each text to its list of vocabulary ids."""
    return [encoding.ids for encoding in tokenizer.encode_batch(texts)]


def save_vocab(tokenizer: Tokenizer, path: Path) -> Path:
    """Write the vocabulary as tokenizer.json so evaluation can reuse it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tokenizer.save(str(path))
    return path


def load_vocab(path: Path) -> Tokenizer:
    """Read a vocabulary written by save_vocab."""
    if not path.is_file():
        raise FileNotFoundError(f"Vocabulary file not found: {path}")
    return Tokenizer.from_file(str(path))
