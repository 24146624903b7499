from __future__ import annotations

from typing import List

from sqlalchemy import Column, Integer, MetaData, String, Table, UniqueConstraint, text
from sqlalchemy.engine import Engine

from tokenmold.domain.repositories import SceneTokenRepository
from .connection import SessionLocal

metadata = MetaData()

scene_token = Table(
    "scene_token",
    metadata,
    Column("scene_token_id", Integer, primary_key=True, autoincrement=True),
    Column("scene_id", String(64), nullable=False),
    Column("actor_id", String(64), nullable=False),
    Column("token_id", String(64), nullable=False),
    Column("name", String(255), nullable=False),
    UniqueConstraint("scene_id", "token_id", name="uq_scene_token_scene_token"),
)


def ensure_schema(engine: Engine) -> None:
    metadata.create_all(engine, tables=[scene_token], checkfirst=True)


class SqlSceneTokenRepository(SceneTokenRepository):
    """Token history in a ``scene_token`` table; row id gives creation order."""

    def list_names_for_actor(self, scene_id: str, actor_id: str) -> List[str]:
        with SessionLocal() as session:
            rows = session.execute(
                text(
                    """
                    SELECT name
                    FROM scene_token
                    WHERE scene_id = :scene_id AND actor_id = :actor_id
                    ORDER BY scene_token_id
                    """
                ),
                {"scene_id": scene_id, "actor_id": actor_id},
            ).all()
        return [row.name for row in rows]

    def last_name_for_actor(self, scene_id: str, actor_id: str) -> str | None:
        with SessionLocal() as session:
            row = session.execute(
                text(
                    """
                    SELECT name
                    FROM scene_token
                    WHERE scene_id = :scene_id AND actor_id = :actor_id
                    ORDER BY scene_token_id DESC
                    LIMIT 1
                    """
                ),
                {"scene_id": scene_id, "actor_id": actor_id},
            ).first()
        return row.name if row is not None else None

    def add(self, scene_id: str, actor_id: str, token_id: str, name: str) -> None:
        params = {"scene_id": scene_id, "actor_id": actor_id, "token_id": token_id, "name": name}
        with SessionLocal() as session:
            updated = session.execute(
                text(
                    """
                    UPDATE scene_token
                    SET actor_id = :actor_id, name = :name
                    WHERE scene_id = :scene_id AND token_id = :token_id
                    """
                ),
                params,
            )
            if not updated.rowcount:
                session.execute(
                    text(
                        """
                        INSERT INTO scene_token (scene_id, actor_id, token_id, name)
                        VALUES (:scene_id, :actor_id, :token_id, :name)
                        """
                    ),
                    params,
                )
            session.commit()

    def list_actor_ids(self, scene_id: str) -> List[str]:
        with SessionLocal() as session:
            rows = session.execute(
                text(
                    """
                    SELECT actor_id, MIN(scene_token_id) AS first_seen
                    FROM scene_token
                    WHERE scene_id = :scene_id
                    GROUP BY actor_id
                    ORDER BY first_seen
                    """
                ),
                {"scene_id": scene_id},
            ).all()
        return [row.actor_id for row in rows]
