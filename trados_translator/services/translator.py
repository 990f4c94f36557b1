"""
Translation Service
===================
Runs one translation job: context lookup, chunking, concurrent dispatch,
reassembly and the memory/terminology side effects.
"""
import asyncio
from typing import Optional, Callable, Tuple

from trados_translator.config import config, SUPPORTED_LANGUAGES
from trados_translator.database.repositories import MemoryRepository, TerminologyRepository
from trados_translator.errors import ConfigurationError, EmptyResponse
from trados_translator.models.translation import (
    TermHint,
    MemoryExemplar,
    TranslationContext,
    TranslationJobResult
)
from trados_translator.services.dispatcher import ChunkDispatcher, join_results
from trados_translator.services.gemini_client import GeminiClient
from trados_translator.services.terminology import TerminologyLearner
from trados_translator.utils.logging import get_channel, debug_print
from trados_translator.utils.text_processing import (
    split_into_chunks,
    clean_translation_response,
    normalize_text
)


def _language_name(code: str) -> str:
    return SUPPORTED_LANGUAGES.get(code, code)


def build_context_prompt(context: TranslationContext) -> str:
    """Render the lookup context as prompt sections."""
    sections = []
    if context.terminology:
        lines = ["TERMINOLOGY:"]
        for hint in context.terminology:
            definition = f" ({hint.definition})" if hint.definition else ""
            lines.append(f'- "{hint.term}" → "{hint.translation}"{definition}')
        sections.append("\n".join(lines))
    if context.memory:
        lines = ["TRANSLATION MEMORY:"]
        for exemplar in context.memory:
            lines.append(f'- "{exemplar.source}" → "{exemplar.target}"')
        sections.append("\n".join(lines))
    if context.linguistic_rules:
        sections.append(f"LINGUISTIC RULES:\n{context.linguistic_rules}")
    if context.punctuation_rules:
        sections.append(f"PUNCTUATION RULES:\n{context.punctuation_rules}")
    return "\n\n".join(sections)


def build_prompt(text: str, source_lang: str, target_lang: str, context: TranslationContext) -> str:
    """Build the prompt for one chunk."""
    context_section = build_context_prompt(context)
    if context_section:
        context_section = f"\n{context_section}\n"

    return f"""You are a professional EU-legal translator. Translate ONLY the text inside <TEXT> tags from {_language_name(source_lang)} to {_language_name(target_lang)}.

STRICT FORMATTING RULES (MUST FOLLOW EXACTLY):
1. Output each recital, article and point on its OWN LINE.
2. Use ONE newline between items and TWO newlines between major sections (e.g. preamble and articles).
3. After EVERY marker insert exactly ONE TAB character. Examples:
   - (1)\\tTranslated text here.
   - 1.\\tTranslated text here.
   - (a)\\tTranslated text here.
4. Never merge lines or remove original line breaks.
5. Do NOT add explanations or comments.
{context_section}
<TEXT>
{text}
</TEXT>

Translation:"""


class TranslationService:
    """
    Translation job orchestrator.

    Lookups run once per job and are shared read-only by every chunk call.
    A job raises only for missing input or credentials; chunk failures are
    reported through ``TranslationJobResult.failed_chunks``.
    """

    def __init__(
        self,
        memory_repo: MemoryRepository = None,
        terminology_repo: TerminologyRepository = None,
        client: GeminiClient = None,
        dispatcher: ChunkDispatcher = None,
        client_factory: Callable[[str], GeminiClient] = GeminiClient
    ):
        self.memory_repo = memory_repo or MemoryRepository()
        self.terminology_repo = terminology_repo or TerminologyRepository()
        self.client = client
        self.dispatcher = dispatcher or ChunkDispatcher()
        self.client_factory = client_factory
        self.learner = TerminologyLearner(self.terminology_repo)
        self.logger = get_channel('translation')

    def build_context(
        self,
        source_lang: str,
        target_lang: str,
        linguistic_rules: Optional[str] = None,
        punctuation_rules: Optional[str] = None
    ) -> TranslationContext:
        """All terminology for the pair plus the most recent memory exemplars."""
        terms = self.terminology_repo.for_language_pair(source_lang, target_lang)
        memory = self.memory_repo.find_exemplars(
            source_lang, target_lang, config.translation.memory_exemplar_limit
        )
        return TranslationContext(
            terminology=tuple(
                TermHint(row['term'], row['translation'], row['definition'] or "") for row in terms
            ),
            memory=tuple(
                MemoryExemplar(row['source_text'], row['target_text'], row['context'] or "") for row in memory
            ),
            linguistic_rules=linguistic_rules or None,
            punctuation_rules=punctuation_rules or None
        )

    def _resolve_client(self, api_key: Optional[str]) -> Tuple[GeminiClient, bool]:
        """The client for one job and whether the job owns (and must close) it."""
        if api_key:
            return self.client_factory(api_key), True
        if self.client is not None:
            return self.client, False
        if not config.gemini.api_key:
            raise ConfigurationError("Gemini API key is required")
        return self.client_factory(config.gemini.api_key), True

    async def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str,
        api_key: Optional[str] = None,
        linguistic_rules: Optional[str] = None,
        punctuation_rules: Optional[str] = None
    ) -> TranslationJobResult:
        """
        Translate a whole document.

        Raises:
            ConfigurationError: empty text or no API key
        """
        if not text or not text.strip():
            raise ConfigurationError("Text to translate is required")

        text = normalize_text(text)
        context = self.build_context(source_lang, target_lang, linguistic_rules, punctuation_rules)
        chunks = split_into_chunks(text, config.translation.chunk_char_limit)

        self.logger.info(
            f"Starting translation: {len(chunks)} chunks, {source_lang} -> {target_lang}, "
            f"{len(context.terminology)} terms, {len(context.memory)} memory exemplars"
        )

        async def translate_one(chunk_text: str) -> str:
            prompt = build_prompt(chunk_text, source_lang, target_lang, context)
            response = await client.generate_async(prompt)
            cleaned = clean_translation_response(response)
            if not cleaned.strip():
                raise EmptyResponse()
            return cleaned

        client, owns_client = self._resolve_client(api_key)
        try:
            results = await self.dispatcher.translate_all(chunks, translate_one)
        finally:
            if owns_client:
                client.close()
        translated = join_results(results)

        job = TranslationJobResult(
            source_text=text,
            translated_text=translated,
            source_lang=source_lang,
            target_lang=target_lang,
            chunk_results=results
        )

        if job.success:
            self.memory_repo.add(text, translated, source_lang, target_lang)
            job.memory_saved = True
            if config.translation.auto_learn_terms:
                job.terms_learned = self.learner.learn(text, translated, source_lang, target_lang)
        else:
            self.logger.warning(
                f"Translation finished with failed chunks {[i + 1 for i in job.failed_chunks]}; "
                f"not saved to memory"
            )

        debug_print(
            f"Job done: {len(results)} chunks, memory_saved={job.memory_saved}, "
            f"terms_learned={job.terms_learned}", 'translation', 'INFO'
        )
        return job

    def translate_sync(self, *args, **kwargs) -> TranslationJobResult:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.translate(*args, **kwargs))
