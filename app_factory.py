# app_factory.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from base_store import BaseStore
from blueprint_repo import BlueprintRepo
from contract_repo import ContractRepo
from persistence import StorePersistence, bind_persistence

# Источник данных
DATA_BACKEND = "json"  # 'json' | 'yaml' | 'db' | 'memory'

DB_CONFIG = {
    "host": "127.0.0.1",
    "port": 5432,
    "dbname": "eurusys_db",
    "user": "postgres",
    "password": "postgres",
    "auto_migrate": True,
}

JSON_DIR = "data"
YAML_DIR = "data"

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = LOG_LEVEL) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


# ---------- фабрика хранилища ----------
def make_store(backend: str = DATA_BACKEND) -> BaseStore:
    """
    Возвращает одно из хранилищ согласно backend.
    """
    if backend == "db":
        from store_db import PgStore

        return PgStore(**DB_CONFIG)  # type: ignore[arg-type]

    if backend == "yaml":
        from store_yaml import YamlFileStore

        return YamlFileStore(YAML_DIR)

    if backend == "memory":
        from store_memory import MemoryStore

        return MemoryStore()

    if backend != "json":
        raise ValueError(f"Неизвестный DATA_BACKEND: {backend!r}")

    from store_json import JsonFileStore

    return JsonFileStore(JSON_DIR)


@dataclass
class Core:
    blueprints: BlueprintRepo
    contracts: ContractRepo
    blueprint_persistence: StorePersistence
    contract_persistence: StorePersistence


def make_core(store: BaseStore | None = None) -> Core:
    """
    Собирает репозитории и подключает к ним хранилище.
    Загрузка: один раз здесь, сохранение: после каждой мутации.
    """
    if store is None:
        store = make_store()

    blueprints = BlueprintRepo()
    contracts = ContractRepo(blueprints)
    bp_persistence = bind_persistence(blueprints, store)
    c_persistence = bind_persistence(contracts, store)
    return Core(
        blueprints=blueprints,
        contracts=contracts,
        blueprint_persistence=bp_persistence,
        contract_persistence=c_persistence,
    )
