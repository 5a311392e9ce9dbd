# pageqa/answerer.py
"""Question answering over scraped page text.

``GroqAnswerer`` calls Groq's OpenAI-compatible chat completions endpoint.
It degrades instead of failing: without an API key, or when the API call
fails, it returns a preview of the page text plus setup guidance. Only
unexpected errors (e.g. a malformed response body) escape, as
``AnswerError``.
"""
import logging

import httpx

from pageqa.exceptions import AnswerError

logger = logging.getLogger(__name__)

GROQ_API_URL = 'https://api.groq.com/openai/v1/chat/completions'

# Characters of page text sent to the model
CONTEXT_CHAR_BUDGET = 10000
# Characters of page text shown in the degraded answer
PREVIEW_CHAR_BUDGET = 800

NO_ANSWER = 'No answer generated.'

SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer the user's question based on the provided context. "
    'If the context is empty, use your general knowledge about the URL provided.'
)


class Answerer:
    def answer(self, context, question, url=None):
        raise NotImplementedError


def build_user_prompt(context, question, url=None):
    return f'URL: {url or "Not provided"}\n\nContext:\n{context}\n\nQuestion: {question}\n\nAnswer:'


def preview_answer(context, question):
    preview = context[:PREVIEW_CHAR_BUDGET]
    return (
        f"Here's the scraped content:\n\n{preview}...\n\n---\n\n"
        f'Question: {question}\n\n'
        'To get AI-powered answers, add a GROQ_API_KEY to your .env file.\n'
        'Get a free API key at: https://console.groq.com/keys'
    )


class GroqAnswerer(Answerer):
    def __init__(self, api_key=None, model='llama-3.1-8b-instant', timeout=30, client=None):
        self.api_key = api_key
        self.model = model
        self._client = client or httpx.Client(timeout=timeout)

    def close(self):
        self._client.close()

    def answer(self, context, question, url=None):
        truncated = (context or '')[:CONTEXT_CHAR_BUDGET]

        if self.api_key:
            try:
                return self._complete(truncated, question, url)
            except httpx.HTTPError as exc:
                logger.error('Groq request failed, falling back to text preview: %s', exc)

        logger.info('No model available, answering with a text preview')
        return preview_answer(truncated, question)

    def _complete(self, context, question, url):
        payload = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': SYSTEM_PROMPT},
                {'role': 'user', 'content': build_user_prompt(context, question, url)},
            ],
            'temperature': 0.7,
            'max_tokens': 500,
        }
        headers = {'Authorization': f'Bearer {self.api_key}'}

        response = self._client.post(GROQ_API_URL, json=payload, headers=headers)
        response.raise_for_status()

        try:
            choices = response.json().get('choices') or []
            content = choices[0].get('message', {}).get('content') if choices else None
        except (ValueError, AttributeError, IndexError) as exc:
            raise AnswerError(f'Unexpected Groq response: {exc}') from exc
        return content or NO_ANSWER
