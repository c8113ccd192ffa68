"""Fetch a consistent snapshot of the fleet tables from a data directory."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List, Union

from .ledger import Ledger
from .loader import (
    EXPENSES_FILE,
    SERVICES_FILE,
    SETTINGS_FILE,
    VEHICLES_FILE,
    load_expenses,
    load_services,
    load_settings,
    load_vehicles,
)
from .validation import load_schema, validate_table_file

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Não foi possível carregar os dados do dashboard."

TABLES = {
    "vehicles": (VEHICLES_FILE, load_vehicles),
    "services": (SERVICES_FILE, load_services),
    "expenses": (EXPENSES_FILE, load_expenses),
}


class LoadError(Exception):
    """One of the table fetches failed; no aggregation may run."""

    def __init__(self, message: str = LOAD_ERROR_MESSAGE, details: str = ""):
        super().__init__(message)
        self.message = message
        self.details = details


def _fetch_table(path: Path, table: str, loader: Callable) -> List:
    if not path.exists():
        raise FileNotFoundError(f"Table file not found: {path}")
    errors = validate_table_file(path, load_schema(table))
    if errors:
        raise ValueError(f"{path.name}: " + " ".join(e.strip() for e in errors))
    return loader(path)


def fetch_snapshot(data_dir: Union[str, Path]) -> Ledger:
    """
    Load vehicles, services and expenses in parallel and build a Ledger.

    All three fetches must succeed. If any one fails, LoadError is raised
    and nothing is aggregated on the partial data.
    """
    data_dir = Path(data_dir)
    results: Dict[str, List] = {}
    failures: List[str] = []

    with ThreadPoolExecutor(max_workers=len(TABLES)) as pool:
        futures = {
            table: pool.submit(_fetch_table, data_dir / filename, table, loader)
            for table, (filename, loader) in TABLES.items()
        }
        for table, future in futures.items():
            try:
                results[table] = future.result()
            except Exception as e:
                logger.error("Failed to load %s: %s", table, e)
                failures.append(f"{table}: {e}")

    settings_path = data_dir / SETTINGS_FILE
    if settings_path.exists():
        errors = validate_table_file(settings_path, load_schema("settings"))
        if errors:
            logger.error("Invalid settings: %s", errors)
            failures.append("settings: " + " ".join(e.strip() for e in errors))

    if failures:
        raise LoadError(details="; ".join(failures))

    try:
        settings = load_settings(settings_path)
    except Exception as e:
        logger.error("Failed to load settings: %s", e)
        raise LoadError(details=f"settings: {e}") from e

    logger.info(
        "Loaded %d vehicles, %d services, %d expenses from %s",
        len(results["vehicles"]),
        len(results["services"]),
        len(results["expenses"]),
        data_dir,
    )
    return Ledger(
        results["vehicles"], results["services"], results["expenses"], settings
    )
