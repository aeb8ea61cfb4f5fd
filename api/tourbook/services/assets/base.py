"""
Base Asset Store - Abstract interface for image hosting backends
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional
import asyncio
import logging

from fastapi import UploadFile

logger = logging.getLogger(__name__)


class ReleaseStatus(Enum):
    """Outcome of releasing a stored asset"""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


@dataclass
class ReleaseResult:
    """Result of a single release call"""
    reference: str
    status: ReleaseStatus
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != ReleaseStatus.FAILURE


class AssetStore(ABC):
    """
    Abstract base class for image asset stores.

    Stored assets are identified by an opaque reference string (the public
    URL for hosted stores).
    """

    name: str = "base"

    @property
    def is_configured(self) -> bool:
        """Check if store has required configuration (API keys, etc.)"""
        return True

    @abstractmethod
    async def store(self, upload: UploadFile) -> str:
        """
        Store an uploaded file.

        Returns:
            Reference of the stored asset

        Raises:
            AssetStoreError: If the asset could not be stored
        """
        pass

    @abstractmethod
    async def release(self, reference: str) -> ReleaseResult:
        """
        Release a stored asset. Must not raise; failures are reported
        through the returned result.
        """
        pass

    async def store_all(self, uploads: Iterable[UploadFile]) -> List[str]:
        """
        Store several uploads concurrently, preserving order.

        If any upload fails the ones that succeeded are released before the
        first error is re-raised.
        """
        results = await asyncio.gather(
            *(self.store(u) for u in uploads), return_exceptions=True
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            await release_all(self, [r for r in results if isinstance(r, str)])
            raise errors[0]
        return list(results)


def has_upload(upload: Optional[UploadFile]) -> bool:
    """Browsers send an empty file part when no file was picked"""
    return upload is not None and bool(upload.filename)


async def release_all(store: AssetStore, references: Iterable[str]) -> List[ReleaseResult]:
    """
    Release every reference concurrently.

    Individual failures are logged and never raised, so a primary write is
    not blocked by asset store hygiene.
    """
    references = [r for r in references if r]
    if not references:
        return []

    async def _release(reference: str) -> ReleaseResult:
        try:
            return await store.release(reference)
        except Exception as e:
            return ReleaseResult(reference, ReleaseStatus.FAILURE, str(e))

    results = await asyncio.gather(*(_release(r) for r in references))

    for result in results:
        if result.status == ReleaseStatus.NOT_FOUND:
            logger.info(f"Asset already released: {result.reference}")
        elif result.status == ReleaseStatus.FAILURE:
            logger.error(f"Failed to release asset {result.reference}: {result.error_message}")

    return list(results)
