"""
Service Container - composition root

Everything that used to be a module-level singleton (database engine,
LLM client, search service) is built here once per process from
Settings and handed to the components that need it:

    Settings
    ├── Database ── JobStore ─────────┐
    │           └── CandidateStore ───┼── SearchSummaryOrchestrator
    ├── TextGenerator ── RequirementInterpreter ─┤
    │                 ├── MatchExplainer ────────┘
    │                 └── ResumeFieldExtractor ── ExtractionStrategy
    └── SessionAuthenticator              ParsingJobTracker ──┘

The API process keeps the container on ``app.state``; each Celery task
builds its own with ``worker=True``.
"""

import logging
from dataclasses import dataclass

from hirewise.auth import SessionAuthenticator
from hirewise.config import Settings
from hirewise.database import Database
from hirewise.services.extraction import (
    ExtractionStrategy,
    ResumeFieldExtractor,
    get_extraction_strategy,
    get_field_extractor,
)
from hirewise.services.generation import TextGenerator, UnavailableTextGenerator, get_text_generator
from hirewise.services.match_explainer import MatchExplainer
from hirewise.services.parsing_tracker import ParsingJobTracker
from hirewise.services.requirement_interpreter import RequirementInterpreter, get_requirement_interpreter
from hirewise.services.search_summary import SearchSummaryOrchestrator
from hirewise.stores import CandidateStore, JobStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    database: Database
    job_store: JobStore
    candidate_store: CandidateStore
    generator: TextGenerator
    interpreter: RequirementInterpreter
    explainer: MatchExplainer
    authenticator: SessionAuthenticator
    field_extractor: ResumeFieldExtractor
    strategy: ExtractionStrategy
    tracker: ParsingJobTracker
    search_summary: SearchSummaryOrchestrator

    @property
    def generation_configured(self) -> bool:
        return not isinstance(self.generator, UnavailableTextGenerator)


def build_container(settings: Settings, worker: bool = False) -> ServiceContainer:
    """
    Build every component once from settings.

    Args:
        settings: Application settings
        worker: True inside a Celery task (NullPool engine, one loop per task)
    """
    database = Database(settings.database_url, null_pool=worker)
    job_store = JobStore(database)
    candidate_store = CandidateStore(database)

    generator = get_text_generator(
        settings.generation_provider,
        api_key=settings.openai_api_key,
        model_name=settings.generation_model,
        temperature=settings.generation_temperature,
        max_tokens=settings.generation_max_tokens,
    )
    interpreter = get_requirement_interpreter(settings.interpreter_provider, generator)
    explainer = MatchExplainer(generator)
    authenticator = SessionAuthenticator(settings.secret_key)

    field_extractor = get_field_extractor(settings.field_extractor, generator, settings.resume_storage_dir)
    strategy = get_extraction_strategy(settings.extraction_strategy, field_extractor)
    tracker = ParsingJobTracker(job_store, strategy)

    search_summary = SearchSummaryOrchestrator(authenticator, candidate_store, interpreter, explainer)

    if not worker:
        logger.info(
            f"Services ready: generation={generator.provider_name}, "
            f"interpreter={settings.interpreter_provider}, extraction={strategy.method}"
        )

    return ServiceContainer(
        settings=settings,
        database=database,
        job_store=job_store,
        candidate_store=candidate_store,
        generator=generator,
        interpreter=interpreter,
        explainer=explainer,
        authenticator=authenticator,
        field_extractor=field_extractor,
        strategy=strategy,
        tracker=tracker,
        search_summary=search_summary,
    )
