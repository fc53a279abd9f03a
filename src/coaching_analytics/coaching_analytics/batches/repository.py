from __future__ import annotations

from typing import Protocol, Sequence


class BatchRegistryRepository(Protocol):
    def list_names(self, management_id: str) -> Sequence[str]:
        raise NotImplementedError
