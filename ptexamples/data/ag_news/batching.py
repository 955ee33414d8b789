# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Collate AG_NEWS records into embedding-bag batches.

For a group of records the batch holds:
  - target: labels, shape (n,)
  - token_ids: every record's ids concatenated, shape (total_tokens,)
  - offsets: start position of each record in token_ids, shape (n,)

e.g. texts of 3, 0 and 2 tokens give offsets [0, 3, 3].
"""

from typing import Sequence

import torch
from tokenizers import Tokenizer

from ptexamples.data.ag_news.reader import NewsRecord
from ptexamples.data.ag_news.vocab import encode_batch
from ptexamples.data.batch import Batch


def collate(
    labels: Sequence[int],
    token_lists: Sequence[Sequence[int]],
    device: torch.device | None = None,
) -> Batch:
    """Build one embedding-bag batch from labels and per-example token ids."""
    if len(labels) != len(token_lists):
        raise ValueError(
            f"Got {len(labels)} labels but {len(token_lists)} token sequences"
        )

    lengths = [len(tokens) for tokens in token_lists]
    offsets = [0]
    for length in lengths[:-1]:
        offsets.append(offsets[-1] + length)

    flat = [token for tokens in token_lists for token in tokens]

    target = torch.tensor(list(labels), dtype=torch.long, device=device)
    token_ids = torch.tensor(flat, dtype=torch.long, device=device)
    offsets_tensor = torch.tensor(offsets[: len(lengths)], dtype=torch.long, device=device)
    return Batch(inputs=(token_ids, offsets_tensor), target=target)


def make_text_batches(
    records: Sequence[NewsRecord],
    tokenizer: Tokenizer,
    batch_size: int,
    device: torch.device | None = None,
) -> list[Batch]:
    """
    Tokenize `records` and group them into batches of `batch_size`.

    The last batch keeps the remainder; order follows the records.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    batches: list[Batch] = []
    for start in range(0, len(records), batch_size):
        chunk = records[start : start + batch_size]
        token_lists = encode_batch(tokenizer, [record.text for record in chunk])
        batches.append(collate([record.label for record in chunk], token_lists, device))
    return batches
