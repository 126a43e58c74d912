"""Interchangeable sale-outcome analysis engines.

``RemoteLLMEngine`` talks to an OpenAI-compatible chat completions API,
``LocalLLMEngine`` to an Ollama server, ``HeuristicEngine`` runs the lexical
rules locally. ``FallbackEngine`` is the fallback policy: it answers from a
primary engine and drops to a secondary one on transport or validation
errors. Which combination runs is decided by ``build_engine``.
"""
from dataclasses import dataclass
from typing import Optional

import requests
from flask import current_app

from ..errors import ConfigurationError, TransportError, ValidationError
from .heuristics import basic_analysis, split_indicators
from .prompts import build_system_prompt, build_user_prompt, parse_analysis_response


@dataclass
class AnalysisResult:
    success_sell: bool
    amount_to_pay: Optional[float]
    reason_fail: Optional[str]
    engine: str = 'unknown'

    @classmethod
    def from_dict(cls, data, engine):
        return cls(data['successSell'], data['amountToPay'], data['reasonFail'], engine)

    def to_dict(self):
        return {
            'successSell': self.success_sell,
            'amountToPay': self.amount_to_pay,
            'reasonFail': self.reason_fail,
            'engine': self.engine,
        }


class AnalysisEngine:
    name = 'base'

    def analyze(self, transcription: str, config: dict) -> AnalysisResult:
        raise NotImplementedError


class ChatEngine(AnalysisEngine):
    """Shared prompt/parse flow for the language-model backends."""

    def __init__(self, model, temperature=0.1, max_tokens=500, timeout=120):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise NotImplementedError

    def _post(self, url, **kwargs):
        try:
            r = requests.post(url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
            return r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise TransportError(f'{self.name} request failed: {e}') from e

    def analyze(self, transcription, config):
        content = self.complete(build_system_prompt(config), build_user_prompt(transcription))
        current_app.logger.info('Received response from %s, parsing JSON', self.name)
        return AnalysisResult.from_dict(parse_analysis_response(content), self.name)


class RemoteLLMEngine(ChatEngine):
    name = 'remote'

    def __init__(self, api_key, model='gpt-4', base_url='https://api.openai.com/v1', **kwargs):
        super().__init__(model, **kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')

    def complete(self, system_prompt, user_prompt):
        if not self.api_key:
            raise TransportError('OPENAI_API_KEY is not set; remote analysis unavailable')
        body = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
            'temperature': self.temperature,
            'max_tokens': self.max_tokens,
        }
        headers = {'Authorization': f'Bearer {self.api_key}', 'Content-Type': 'application/json'}
        jr = self._post(f'{self.base_url}/chat/completions', headers=headers, json=body)
        try:
            return jr['choices'][0]['message']['content'] or ''
        except (KeyError, IndexError, TypeError):
            raise ValidationError('No response received from OpenAI')


class LocalLLMEngine(ChatEngine):
    name = 'local'

    def __init__(self, host='http://localhost:11434', model='deepseek-llm', **kwargs):
        super().__init__(model, **kwargs)
        self.host = host.rstrip('/')

    def complete(self, system_prompt, user_prompt):
        current_app.logger.info('Sending request to Ollama with %s model', self.model)
        body = {
            'model': self.model,
            'messages': [
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': user_prompt},
            ],
            'stream': False,
            'options': {'temperature': self.temperature, 'num_predict': self.max_tokens},
        }
        jr = self._post(f'{self.host}/api/chat', json=body)
        content = (jr.get('message') or {}).get('content') if isinstance(jr, dict) else None
        if not content:
            raise ValidationError('No response received from Ollama')
        return content

    def check_model_availability(self) -> bool:
        try:
            r = requests.get(f'{self.host}/api/tags', timeout=self.timeout)
            r.raise_for_status()
            names = [m.get('name', '') for m in r.json().get('models', [])]
        except (requests.exceptions.RequestException, ValueError):
            current_app.logger.exception('Error checking model availability')
            return False
        if not any(self.model in n for n in names):
            current_app.logger.warning('%s model not found. Available models: %s', self.model, names)
            return False
        return True

    def pull_model(self):
        current_app.logger.info('Pulling %s model...', self.model)
        self._post(f'{self.host}/api/pull', json={'model': self.model, 'stream': False})
        current_app.logger.info('%s model pulled successfully', self.model)


class HeuristicEngine(AnalysisEngine):
    name = 'heuristic'

    def __init__(self, positive, negative):
        self.positive = split_indicators(positive)
        self.negative = split_indicators(negative)

    def analyze(self, transcription, config):
        config = config or {}
        # a project may carry its own indicator lists
        positive = split_indicators(config.get('positive_indicators')) or self.positive
        negative = split_indicators(config.get('negative_indicators')) or self.negative
        return AnalysisResult.from_dict(basic_analysis(transcription, positive, negative), self.name)


class FallbackEngine(AnalysisEngine):
    """Primary engine with an explicit fallback on transport/validation errors."""

    FALLBACK_ERRORS = (TransportError, ValidationError)

    def __init__(self, primary, fallback, enabled=True):
        self.primary = primary
        self.fallback = fallback
        self.enabled = enabled

    @property
    def name(self):
        return f'{self.primary.name}+{self.fallback.name}'

    def analyze(self, transcription, config):
        try:
            return self.primary.analyze(transcription, config)
        except self.FALLBACK_ERRORS as e:
            if not self.enabled:
                raise
            current_app.logger.warning('Falling back to %s analysis due to %s error: %s',
                                       self.fallback.name, self.primary.name, e)
            return self.fallback.analyze(transcription, config)


def build_engine(config) -> AnalysisEngine:
    backend = (config.get('ANALYSIS_BACKEND') or 'remote').lower()
    heuristic = HeuristicEngine(config.get('HEURISTIC_POSITIVE_INDICATORS'),
                                config.get('HEURISTIC_NEGATIVE_INDICATORS'))
    if backend == 'heuristic':
        return heuristic

    llm_kwargs = {
        'temperature': config.get('LLM_TEMPERATURE', 0.1),
        'max_tokens': config.get('LLM_MAX_TOKENS', 500),
        'timeout': config.get('HTTP_TIMEOUT_SEC', 120),
    }
    if backend == 'remote':
        primary = RemoteLLMEngine(
            api_key=config.get('OPENAI_API_KEY'),
            model=config.get('OPENAI_CHAT_MODEL') or 'gpt-4',
            base_url=config.get('OPENAI_BASE_URL') or 'https://api.openai.com/v1',
            **llm_kwargs,
        )
    elif backend == 'local':
        primary = LocalLLMEngine(
            host=config.get('OLLAMA_HOST') or 'http://localhost:11434',
            model=config.get('OLLAMA_MODEL') or 'deepseek-llm',
            **llm_kwargs,
        )
    else:
        raise ConfigurationError(f'Unknown ANALYSIS_BACKEND: {backend}')
    return FallbackEngine(primary, heuristic, enabled=bool(config.get('ANALYSIS_FALLBACK', True)))
