import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from src.adapters.clock import SystemClock
from src.adapters.local_storage import create_local_storage
from src.adapters.memory import InMemoryDocumentStore, InMemoryObjectStore
from src.adapters.sqlite_db import SQLiteDocumentStore
from src.components.imaging import ImagePolicy, policy_from_rules
from src.components.moderation import ModerationConfig, ModerationQueue
from src.components.news import NewsCache
from src.components.subscribers import SubscriberConfig, SubscriberDirectory
from src.components.testimonials import TestimonialConfig, TestimonialCuration
from src.core.ports.clock import ClockPort
from src.core.ports.documents import DocumentStorePort
from src.core.ports.storage import ObjectStorePort
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("SITE_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "site.db")
        self.media_dir = self.data_dir / "media"
        self.rules_path = Path(
            os.environ.get("SITE_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        self.public_base_url = os.environ.get(
            "SITE_PUBLIC_BASE_URL", "http://localhost:8000"
        ).rstrip("/")
        self.store_backend = os.environ.get("SITE_STORE_BACKEND", "sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_banner_policy(rules: Rules = Depends(get_rules)) -> ImagePolicy:
    return policy_from_rules(rules, "banner")


def get_avatar_policy(rules: Rules = Depends(get_rules)) -> ImagePolicy:
    return policy_from_rules(rules, "avatar")


# --- Adapters ---
_clock_instance: SystemClock | None = None


def get_clock() -> ClockPort:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


_document_store_instance: DocumentStorePort | None = None


def get_document_store(
    settings: Settings = Depends(get_settings),
    clock: ClockPort = Depends(get_clock),
) -> DocumentStorePort:
    """Get document store singleton (SQLite unless SITE_STORE_BACKEND=memory)."""
    global _document_store_instance
    if _document_store_instance is None:
        if settings.store_backend == "memory":
            _document_store_instance = InMemoryDocumentStore(clock)
        else:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
            _document_store_instance = SQLiteDocumentStore(settings.db_path, clock)
    return _document_store_instance


_object_store_instance: ObjectStorePort | None = None


def get_object_store(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> ObjectStorePort:
    """Get object store singleton; objects are served back under the media path."""
    global _object_store_instance
    if _object_store_instance is None:
        media_url = settings.public_base_url + rules.site.media_path
        if settings.store_backend == "memory":
            _object_store_instance = InMemoryObjectStore(media_url)
        else:
            _object_store_instance = create_local_storage(media_url, settings.media_dir)
    return _object_store_instance


# --- Component Services ---
_moderation_queue_instance: ModerationQueue | None = None


def get_moderation_queue(
    store: DocumentStorePort = Depends(get_document_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ModerationQueue:
    """Get moderation queue singleton (holds the admin's pending list)."""
    global _moderation_queue_instance
    if _moderation_queue_instance is None:
        _moderation_queue_instance = ModerationQueue(
            store,
            clock,
            ModerationConfig(
                confirmation_ttl_seconds=rules.moderation.confirmation_ttl_seconds,
                use_transactions=rules.moderation.use_transactions,
            ),
        )
    return _moderation_queue_instance


_testimonial_curation_instance: TestimonialCuration | None = None


def get_testimonial_curation(
    store: DocumentStorePort = Depends(get_document_store),
    storage: ObjectStorePort = Depends(get_object_store),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
    policy: ImagePolicy = Depends(get_avatar_policy),
) -> TestimonialCuration:
    """Get testimonial curation singleton."""
    global _testimonial_curation_instance
    if _testimonial_curation_instance is None:
        _testimonial_curation_instance = TestimonialCuration(
            store,
            storage,
            clock=clock,
            config=TestimonialConfig(
                max_text_length=rules.testimonials.max_text_length,
                allowed_link_hosts=tuple(rules.testimonials.allowed_link_hosts),
            ),
            policy=policy,
        )
    return _testimonial_curation_instance


def get_subscriber_directory(
    store: DocumentStorePort = Depends(get_document_store),
    rules: Rules = Depends(get_rules),
) -> SubscriberDirectory:
    return SubscriberDirectory(
        store,
        SubscriberConfig(
            compose_base_url=rules.newsletter.compose_base_url,
            export_filename_prefix=rules.newsletter.export_filename_prefix,
        ),
    )


_news_cache_instance: NewsCache | None = None


def get_news_cache(store: DocumentStorePort = Depends(get_document_store)) -> NewsCache:
    """Get news cache singleton. Started and stopped by the app lifespan."""
    global _news_cache_instance
    if _news_cache_instance is None:
        _news_cache_instance = NewsCache(store)
    return _news_cache_instance


def reset_singletons() -> None:
    """Drop every cached adapter and service (tests, reconfiguration)."""
    global _clock_instance, _document_store_instance, _object_store_instance
    global _moderation_queue_instance, _testimonial_curation_instance, _news_cache_instance
    _clock_instance = None
    _document_store_instance = None
    _object_store_instance = None
    _moderation_queue_instance = None
    _testimonial_curation_instance = None
    _news_cache_instance = None
    get_settings.cache_clear()
    get_rules.cache_clear()
