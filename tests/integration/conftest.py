"""Fixtures for store tests against an in-memory SQLite database."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from prompt_versions.core.database import Base
from prompt_versions.models.versions import Prompt, PromptVersion


def new_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


async def seed_prompt(session: AsyncSession, **values) -> Prompt:
    prompt = Prompt(row_id=new_id(), **values)
    session.add(prompt)
    await session.flush()
    return prompt


async def seed_version(
    session: AsyncSession,
    prompt: Prompt,
    version_number: int,
    snapshot: dict,
    **values,
) -> PromptVersion:
    version = PromptVersion(
        row_id=new_id(),
        prompt_row_id=prompt.row_id,
        version_number=version_number,
        snapshot=snapshot,
        fields_changed=sorted(snapshot),
        **values,
    )
    session.add(version)
    await session.flush()
    return version
