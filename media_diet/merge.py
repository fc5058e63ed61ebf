"""Identity-keyed merging of stored and freshly fetched records."""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterable, List, TypeVar

from .models import MediaRecord

RecordT = TypeVar("RecordT", bound=MediaRecord)


def merge_by_identity(existing: Iterable[RecordT], incoming: Iterable[RecordT]) -> List[RecordT]:
    """Merge two record sequences, the incoming record winning on identity.

    Existing identities keep their position; identities seen only in
    ``incoming`` are appended in the order they arrive.
    """

    merged: "OrderedDict[str, RecordT]" = OrderedDict()
    for record in existing:
        merged[record.identity] = record
    for record in incoming:
        merged[record.identity] = record
    return list(merged.values())


__all__ = ["merge_by_identity"]
