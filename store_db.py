# store_db.py
from __future__ import annotations

import json
from typing import Any

import psycopg2
from psycopg2.extras import Json

from base_store import BaseStore
from db_singleton import PgDB
from errors import StoreError


class PgStore(BaseStore):
    """
    Снимки репозиториев в PostgreSQL: одна строка JSONB на namespace.
    SQL делегируется в PgDB.
    """

    def __init__(
        self,
        *,
        host: str = "127.0.0.1",
        port: int = 5432,
        dbname: str = "eurusys_db",
        user: str = "postgres",
        password: str = "postgres",
        auto_migrate: bool = True,
    ) -> None:
        PgDB.init(host=host, port=port, dbname=dbname, user=user, password=password)
        # таблицу создаём при первом обращении: конструктор не ходит в БД
        self._schema_pending = auto_migrate

    def _ready(self) -> PgDB:
        if self._schema_pending:
            self.ensure_schema()
            self._schema_pending = False
        return PgDB.get()

    def ensure_schema(self) -> None:
        """Создаёт таблицу, если её ещё нет."""
        ddl_table = """
        CREATE TABLE IF NOT EXISTS kv_store (
            namespace   TEXT        PRIMARY KEY,
            payload     JSONB       NOT NULL,
            updated_at  TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        """
        try:
            PgDB.get().execute(ddl_table)
        except psycopg2.Error as exc:
            raise StoreError(f"Не удалось создать таблицу kv_store: {exc}") from exc

    def load(self, namespace: str) -> list[dict[str, Any]] | None:
        db = self._ready()
        try:
            row = db.fetch_one(
                "SELECT payload FROM kv_store WHERE namespace = %s;", (namespace,)
            )
        except psycopg2.Error as exc:
            raise StoreError(f"Не удалось прочитать {namespace}: {exc}") from exc
        if row is None:
            return None
        payload = row["payload"]
        # JSONB обычно уже разобран драйвером, TEXT-колонку разберём сами
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise StoreError(f"{namespace}: некорректный JSON в БД: {exc}") from exc
        return self._ensure_array(payload, f"kv_store[{namespace}]")

    def save(self, namespace: str, records: list[dict[str, Any]]) -> None:
        sql = """
        INSERT INTO kv_store (namespace, payload, updated_at)
        VALUES (%s, %s, now())
        ON CONFLICT (namespace)
        DO UPDATE SET payload = EXCLUDED.payload, updated_at = EXCLUDED.updated_at;
        """
        db = self._ready()
        try:
            db.execute(sql, (namespace, Json(records)))
        except psycopg2.Error as exc:
            raise StoreError(f"Не удалось записать {namespace}: {exc}") from exc
