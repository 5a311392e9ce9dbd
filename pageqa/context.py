# pageqa/context.py
"""Process-wide wiring, built once at startup and closed on shutdown."""
import logging

from pageqa.answerer import GroqAnswerer
from pageqa.database import init_db, make_engine, make_session_factory
from pageqa.dispatch import build_dispatcher
from pageqa.processor import TaskProcessor
from pageqa.renderer import PlaywrightRenderer
from pageqa.store import TaskStore

logger = logging.getLogger(__name__)


class AppContext:
    def __init__(self, settings, engine, store, renderer, answerer, processor, dispatcher):
        self.settings = settings
        self.engine = engine
        self.store = store
        self.renderer = renderer
        self.answerer = answerer
        self.processor = processor
        self.dispatcher = dispatcher

    @classmethod
    def from_settings(cls, settings, renderer=None, answerer=None, enqueue=None):
        engine = make_engine(settings.database_url)
        init_db(engine)
        store = TaskStore(make_session_factory(engine))

        if renderer is None:
            renderer = PlaywrightRenderer(
                timeout_ms=settings.render_timeout_ms,
                production=settings.production,
                chrome_executable_path=settings.chrome_executable_path,
            )
        if answerer is None:
            if not settings.groq_api_key:
                logger.warning('GROQ_API_KEY is not set; answers will be text previews')
            answerer = GroqAnswerer(
                api_key=settings.groq_api_key,
                model=settings.groq_model,
                timeout=settings.answer_timeout_seconds,
            )

        processor = TaskProcessor(store, renderer, answerer)
        dispatcher = build_dispatcher(settings, store, processor, enqueue=enqueue)
        return cls(settings, engine, store, renderer, answerer, processor, dispatcher)

    def close(self):
        close_answerer = getattr(self.answerer, 'close', None)
        if close_answerer is not None:
            close_answerer()
        self.engine.dispose()
