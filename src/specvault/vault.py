"""The vault: one storage provider, one cache and the managers sharing them."""

from pathlib import Path
from types import TracebackType
from typing import Final, Self

from structlog.typing import FilteringBoundLogger

from specvault.audit import AuditSink, StorageAuditSink
from specvault.cache import CacheLayer
from specvault.config import VaultConfiguration
from specvault.documents import DocumentStore
from specvault.folders import FolderManager
from specvault.lineage import LineageManager
from specvault.storage import FileSystemStorage, StorageProvider
from specvault.utils import create_logger, get_null_logger

__all__ = ["SpecVault"]


class SpecVault:
    """Wires the vault components together.

    Use as an async context manager so the cache can refresh entries in the
    background::

        async with SpecVault.from_config(config) as vault:
            await vault.folders.ensure_default_folders()
            document = await vault.documents.load("petstore", "v1.0.0")

    Attributes:
        storage: The storage provider.
        cache: The shared cache.
        folders: Folder manager.
        documents: Document store.
        lineage: Lineage manager.
        audit: Audit sink, if any.
        logger: Logger shared by all components.
    """

    __slots__: Final = (
        "audit",
        "cache",
        "documents",
        "folders",
        "lineage",
        "logger",
        "storage",
    )

    storage: StorageProvider
    cache: CacheLayer
    folders: FolderManager
    documents: DocumentStore
    lineage: LineageManager
    audit: AuditSink | None
    logger: FilteringBoundLogger

    def __init__(
        self,
        storage: StorageProvider,
        *,
        cache: CacheLayer | None = None,
        default_folder: str = "active",
        audit: AuditSink | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self.logger = logger if logger is not None else get_null_logger()
        self.storage = storage
        self.cache = cache if cache is not None else CacheLayer(logger=self.logger)
        self.audit = audit
        self.folders = FolderManager(storage, self.cache, logger=self.logger)
        self.documents = DocumentStore(
            storage,
            self.cache,
            self.folders,
            default_folder=default_folder,
            audit=audit,
            logger=self.logger,
        )
        self.lineage = LineageManager(
            storage,
            self.cache,
            self.documents,
            self.folders,
            default_folder=default_folder,
            audit=audit,
            logger=self.logger,
        )
        self.folders.bind_lineage(self.lineage)

    @classmethod
    def from_config(
        cls,
        config: VaultConfiguration,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Build a file-system backed vault from configuration."""
        if logger is None:
            logger = create_logger(
                level=config.logging.level,
                log_format=config.logging.format.value,
                log_file=config.logging.file,
            )
        storage = FileSystemStorage(Path(config.storage.base_path), logger=logger)
        cache = CacheLayer(
            config.cache.max_bytes,
            config.cache.max_items,
            revalidate=config.cache.revalidate,
            logger=logger,
        )
        return cls(
            storage,
            cache=cache,
            default_folder=config.storage.default_folder,
            audit=StorageAuditSink(storage, logger=logger),
            logger=logger,
        )

    async def __aenter__(self) -> Self:
        _ = await self.cache.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return await self.cache.__aexit__(exc_type, exc_val, exc_tb)
