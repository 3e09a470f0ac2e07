import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from core.cache.daily_cache import DailyCache, InMemoryDailyCache, RedisDailyCache
from core.candidates import CandidateService
from core.config_loader import AppConfig, LlmConfig, SearchConfig, StorageConfig
from core.documents.section_generator import SectionGenerator
from core.documents.service import CompetenceDocumentService
from core.jobs import JobService
from core.llm.interfaces import LLMProvider
from core.llm.memory_provider import InMemoryLLMProvider
from core.llm.openai_service import OpenAIService
from core.quotes import DailyQuoteService
from core.rendering.document_renderer import DocumentRenderer
from core.rendering.pdf_printer import PdfPrinter, PlaywrightPdfPrinter
from core.search.algolia_client import AlgoliaClient
from core.search.interfaces import SearchIndex
from core.search.memory_index import InMemorySearchIndex
from core.search.records import RecordType
from core.search.synchronizer import IndexSynchronizer
from core.storage.cloudinary_store import CloudinaryStore
from core.storage.interfaces import ObjectStore
from core.storage.memory_store import InMemoryObjectStore
from core.storage.publisher import ArtifactPublisher
from database.database import init_database
from etl.resume.extractor import ProfileExtractor
from etl.resume.parser import DocumentTextReader

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access goes through
    recruitment_uow(session_factory) inside each service call.
    """
    config: AppConfig
    session_factory: sessionmaker
    llm: LLMProvider
    object_store: ObjectStore
    search_index: SearchIndex
    extractor: ProfileExtractor
    text_reader: DocumentTextReader
    generator: SectionGenerator
    renderer: DocumentRenderer
    publisher: ArtifactPublisher
    synchronizer: IndexSynchronizer
    documents: CompetenceDocumentService
    candidates: CandidateService
    jobs: JobService
    quotes: DailyQuoteService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        session_factory: Optional[sessionmaker] = None,
        pdf_printer: Optional[PdfPrinter] = None
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Overrides the engine built from config.database
            pdf_printer: Overrides the printer chosen by config.rendering

        Returns:
            Fully wired AppContext instance
        """
        if session_factory is None:
            session_factory = init_database(config.database.url, create_tables=config.database.create_tables)

        llm = cls._build_llm(config.llm)
        object_store = cls._build_object_store(config.storage)
        search_index = cls._build_search_index(config.search)

        extraction = config.extraction
        extractor = ProfileExtractor(
            llm,
            max_file_bytes=extraction.max_file_bytes,
            min_text_chars=extraction.min_text_chars,
            max_text_chars=extraction.max_text_chars,
        )

        if pdf_printer is None and config.rendering.pdf_engine == "playwright":
            pdf_printer = PlaywrightPdfPrinter(timeout_seconds=config.rendering.pdf_timeout_seconds)

        generator = SectionGenerator(llm)
        renderer = DocumentRenderer(pdf_printer)
        publisher = ArtifactPublisher(
            object_store,
            root_folder=config.storage.root_folder,
            image_max_bytes=config.storage.logo_max_bytes,
            image_max_dimension=config.storage.logo_max_dimension,
        )
        synchronizer = IndexSynchronizer(
            search_index,
            session_factory=session_factory,
            index_names={
                RecordType.CANDIDATE: config.search.candidates_index,
                RecordType.JOB: config.search.jobs_index,
                RecordType.COMPETENCE_FILE: config.search.competence_files_index,
            },
            batch_size=config.search.batch_size,
            failure_log_size=config.search.failure_log_size,
        )

        return cls(
            config=config,
            session_factory=session_factory,
            llm=llm,
            object_store=object_store,
            search_index=search_index,
            extractor=extractor,
            text_reader=DocumentTextReader(extraction.max_file_bytes),
            generator=generator,
            renderer=renderer,
            publisher=publisher,
            synchronizer=synchronizer,
            documents=CompetenceDocumentService(generator, renderer, publisher, synchronizer, session_factory),
            candidates=CandidateService(synchronizer, session_factory),
            jobs=JobService(synchronizer, session_factory),
            quotes=DailyQuoteService(cls._build_daily_cache(config)),
        )

    @staticmethod
    def _build_llm(llm_config: LlmConfig) -> LLMProvider:
        """Build the completion service from LLM configuration."""
        if llm_config.provider == "memory":
            logger.warning("Using in-memory LLM provider")
            return InMemoryLLMProvider()

        return OpenAIService(
            api_key=llm_config.api_key,
            base_url=llm_config.base_url,
            model_config=llm_config.model_dump(),
            timeout_seconds=llm_config.request_timeout_seconds,
            max_retries=llm_config.max_retries,
        )

    @staticmethod
    def _build_object_store(storage_config: StorageConfig) -> ObjectStore:
        if storage_config.provider == "memory":
            logger.warning("Using in-memory object store")
            return InMemoryObjectStore()

        return CloudinaryStore(
            cloud_name=storage_config.cloud_name,
            api_key=storage_config.api_key,
            api_secret=storage_config.api_secret,
            timeout_seconds=storage_config.request_timeout_seconds,
        )

    @staticmethod
    def _build_search_index(search_config: SearchConfig) -> SearchIndex:
        if search_config.provider == "memory":
            logger.warning("Using in-memory search index")
            return InMemorySearchIndex()

        return AlgoliaClient(
            app_id=search_config.app_id,
            api_key=search_config.api_key,
            timeout_seconds=search_config.request_timeout_seconds,
        )

    @staticmethod
    def _build_daily_cache(config: AppConfig) -> DailyCache:
        if config.cache.redis_url:
            return RedisDailyCache(config.cache.redis_url)
        return InMemoryDailyCache()
