#!/usr/bin/env python3
"""
Configuration.

Settings are read from ``AXIOM_*`` environment variables (nested sections
use ``__``, e.g. ``AXIOM_WORKFLOW__MAX_RETRIES=5``) or an ``.env`` file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from axiom.common.timebase import Timebase
from axiom.core.engine import AxiomEngine
from axiom.critique.models import CritiqueBehaviorConfig, CritiqueTriggerConfig
from axiom.events.bridge import EventBridge
from axiom.events.transport import SyncFileTransport
from axiom.events.types import Verbosity
from axiom.stores.base import TokenStore
from axiom.stores.jsonl import JsonlTokenStore
from axiom.stores.memory import InMemoryTokenStore

logger = logging.getLogger(__name__)


class WorkflowConfig(BaseModel):
    max_retries: int = Field(default=3, ge=0, description="Regeneration attempts before rejecting")
    max_steps: int = Field(default=100, ge=1, description="Step ceiling per engine run")


class EventsConfig(BaseModel):
    verbosity: Verbosity = Field(default=Verbosity.NORMAL, description="Which events are logged")
    log_events: bool = Field(default=True, description="Log events through the axiom.events logger")
    buffer_size: int = Field(default=100, ge=1, description="Recent events kept in memory")
    jsonl_path: Optional[Path] = Field(default=None, description="Append events to this JSONL file")


class PersistenceConfig(BaseModel):
    enabled: bool = Field(default=False, description="Persist tokens to a JSONL file")
    path: Path = Field(default=Path(".axiom/tokens.jsonl"), description="Token store file")
    retention_days: float = Field(default=30, gt=0, description="Age after which cleanup drops tokens")


class CritiqueConfig(BaseModel):
    enabled: bool = Field(default=True, description="Run the Devil's Advocate stage")
    triggers: CritiqueTriggerConfig = Field(default_factory=CritiqueTriggerConfig)
    behavior: CritiqueBehaviorConfig = Field(default_factory=CritiqueBehaviorConfig)


class AxiomSettings(BaseSettings):
    """Top-level AXIOM settings."""

    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    critique: CritiqueConfig = Field(default_factory=CritiqueConfig)

    model_config = SettingsConfigDict(
        env_prefix="AXIOM_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )


def create_token_store(settings: AxiomSettings) -> TokenStore:
    if settings.persistence.enabled:
        return JsonlTokenStore(settings.persistence.path)
    return InMemoryTokenStore()


async def prune_token_store(store: TokenStore, settings: Optional[AxiomSettings] = None) -> int:
    """Apply the configured retention period to a token store.

    Returns the number of tokens removed.
    """
    settings = settings or AxiomSettings()
    removed = await store.cleanup(settings.persistence.retention_days)
    logger.debug(f"Pruned {removed} token(s) past {settings.persistence.retention_days} days")
    return removed


def create_event_bridge(settings: AxiomSettings) -> EventBridge:
    transport = None
    if settings.events.jsonl_path is not None:
        transport = SyncFileTransport(settings.events.jsonl_path)
    return EventBridge(
        verbosity=settings.events.verbosity,
        log_events=settings.events.log_events,
        buffer_size=settings.events.buffer_size,
        transport=transport,
    )


def create_default_engine(
    settings: Optional[AxiomSettings] = None,
    token_store: Optional[TokenStore] = None,
    event_bridge: Optional[EventBridge] = None,
    timebase: Optional[Timebase] = None,
) -> AxiomEngine:
    """Build an unwired engine from settings.

    Explicit arguments win over what the settings would construct.
    """
    settings = settings or AxiomSettings()
    engine = AxiomEngine(
        token_store=token_store or create_token_store(settings),
        event_bridge=event_bridge or create_event_bridge(settings),
        max_steps=settings.workflow.max_steps,
        timebase=timebase,
    )
    logger.debug(f"Created engine (max_steps={engine.max_steps})")
    return engine
