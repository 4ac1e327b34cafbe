#!/usr/bin/env python3
"""Demonstration of drivers, nested transactions and repositories."""

from dbmanager import (
    DbManager,
    Entity,
    EntityRepository,
    get_logger,
    load_settings,
    setup_logging_from_settings,
)


class Note(Entity):
    """Note stored in the demo database."""

    id: int
    title: str


class NoteRepository(EntityRepository[Note]):
    """Repository of notes."""

    entity_class = Note

    def find_all(self) -> list[Note]:
        return self.fetch_entities("SELECT id, title FROM notes ORDER BY id")


def main() -> None:
    """Demonstrate the database layer."""
    setup_logging_from_settings(load_settings())
    logger = get_logger(__name__)

    config = {"driver": {"name": "sqlite", "arguments": [{"location": "memory"}]}}

    with DbManager(config, logger=logger) as db_manager:
        driver = db_manager.get_driver()
        assert driver is not None

        driver.exec("CREATE TABLE notes (id INTEGER PRIMARY KEY, title TEXT)")
        logger.info(f"Tables: {driver.get_table_names()}")

        # Demo 1: Nested transactions commit once
        logger.info("=== Demo 1: Nested transactions ===")
        first = driver.protect_data("First <b>note</b>")
        second = driver.protect_data("O'Brien")
        with driver.transaction():
            driver.exec(f"INSERT INTO notes (title) VALUES ({first})")
            with driver.transaction():
                driver.exec(f"INSERT INTO notes (title) VALUES ({second})")
            logger.info(f"Depth inside outer block: {driver.transaction_depth}")

        # Demo 2: Rollback unwinds every level
        logger.info("=== Demo 2: Rollback ===")
        driver.begin_transaction()
        driver.begin_transaction()
        driver.exec("INSERT INTO notes (title) VALUES ('discarded')")
        driver.roll_back()
        logger.info(f"Depth after rollback: {driver.transaction_depth}")

        # Demo 3: Repositories
        logger.info("=== Demo 3: Repositories ===")
        notes = db_manager.get_repository(NoteRepository).find_all()
        for note in notes:
            logger.info(f"Note {note.id}: {note.title}")


if __name__ == "__main__":
    main()
