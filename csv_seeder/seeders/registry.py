# csv_seeder/seeders/registry.py
"""
Explicit table -> seeder mapping.

Seeders are looked up by table name in a registry the caller fills,
instead of deriving a class name from the table at runtime.
"""

from typing import Callable, Optional

from common.api_error import SeederNotFound
from common.config import SeederSettings
from common.logger import get_app_logger
from csv_seeder.db import DbManager
from .csv_seeder import CsvSeeder

SeederFactory = Callable[..., CsvSeeder]

logger = get_app_logger(__name__)


class SeederRegistry:
    """
    Service coordinating the seeders of one run.

    Usage:
        registry = SeederRegistry(db_manager, settings)
        registry.register("accounts", AccountsSeeder)
        registry.register("users")          # plain CsvSeeder
        registry.seed_all()
    """

    def __init__(
        self,
        db_manager: Optional[DbManager],
        settings: SeederSettings,
        *,
        dry_run: bool = False,
    ) -> None:
        self.db_manager = db_manager
        self.settings = settings
        self.dry_run = dry_run
        self._factories: dict[str, SeederFactory] = {}

    def register(self, table: str, factory: SeederFactory = CsvSeeder) -> None:
        """
        Map ``table`` to a seeder.

        Args:
            table: Table name
            factory: CsvSeeder subclass, or any callable accepting
                ``(db_manager, settings, table=..., dry_run=...)``
        """
        self._factories[table] = factory

    def tables(self) -> list[str]:
        """Registered tables, in registration order."""
        return list(self._factories)

    def __contains__(self, table: object) -> bool:
        return table in self._factories

    def resolve(self, table: str) -> CsvSeeder:
        """
        Build the seeder for ``table``.

        Raises:
            SeederNotFound: Nothing registered for ``table``
            SeederEnvironmentError: Seeder not allowed in this environment
        """
        factory: Optional[SeederFactory] = self._factories.get(table)
        if factory is None:
            raise SeederNotFound(table)
        return factory(
            self.db_manager, self.settings, table=table, dry_run=self.dry_run
        )

    def seed_table(self, table: str) -> int:
        """Run the seeder registered for ``table``; returns inserted rows."""
        logger.debug("Running seeder", table=table)
        return self.resolve(table).run()

    def seed_all(self) -> dict[str, int]:
        """Seed every registered table in registration order."""
        return {table: self.seed_table(table) for table in self._factories}


__all__ = ["SeederRegistry", "SeederFactory"]
