"""Speech-to-text over plain HTTP.

Both backends are called with ``requests`` rather than vendor SDKs. Failures
are raised, never replaced by placeholder text: the transcription sweep needs
to know a record was not transcribed.
"""
import mimetypes

import requests

from ..errors import ConfigurationError, TransportError

DEEPGRAM_URL = 'https://api.deepgram.com/v1/listen'


def _content_type(filename):
    if filename:
        guessed = mimetypes.guess_type(filename)[0]
        if guessed:
            return guessed
    return 'audio/wav'


class SpeechToText:
    backend = 'base'

    def transcribe(self, stream, filename=None, language=None) -> str:
        raise NotImplementedError


class OpenAISpeechToText(SpeechToText):
    backend = 'openai'

    def __init__(self, api_key, base_url='https://api.openai.com/v1', model='whisper-1',
                 language='es', timeout=120):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.language = language
        self.timeout = timeout

    def transcribe(self, stream, filename=None, language=None) -> str:
        if not self.api_key:
            raise ConfigurationError('OPENAI_API_KEY is not set; cannot transcribe audio')
        url = f'{self.base_url}/audio/transcriptions'
        files = {'file': (filename or 'audio.wav', stream, _content_type(filename))}
        data = {'model': self.model, 'language': language or self.language}
        try:
            r = requests.post(url, headers={'Authorization': f'Bearer {self.api_key}'},
                              files=files, data=data, timeout=self.timeout)
            r.raise_for_status()
            jr = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise TransportError(f'Failed to transcribe audio: {e}', filename=filename) from e
        text = jr.get('text') if isinstance(jr, dict) else None
        if text is None:
            raise TransportError('Transcription response carried no text', filename=filename)
        return text


class DeepgramSpeechToText(SpeechToText):
    backend = 'deepgram'

    def __init__(self, api_key, language='es', timeout=120):
        self.api_key = api_key
        self.language = language
        self.timeout = timeout

    def transcribe(self, stream, filename=None, language=None) -> str:
        if not self.api_key:
            raise ConfigurationError('DEEPGRAM_API_KEY is not set; cannot transcribe audio')
        params = {'punctuate': 'true', 'language': language or self.language}
        headers = {
            'Authorization': f'Token {self.api_key}',
            'Content-Type': _content_type(filename),
        }
        try:
            r = requests.post(DEEPGRAM_URL, params=params, headers=headers, data=stream.read(),
                              timeout=self.timeout)
            r.raise_for_status()
            jr = r.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise TransportError(f'Failed to transcribe audio: {e}', filename=filename) from e

        # Deepgram typical shape: {results: {channels: [{alternatives:[{transcript:...}]}]}}
        try:
            return jr['results']['channels'][0]['alternatives'][0]['transcript']
        except (KeyError, IndexError, TypeError):
            raise TransportError('Unexpected Deepgram response shape', filename=filename)


def build_speech_to_text(config) -> SpeechToText:
    backend = (config.get('STT_BACKEND') or 'openai').lower()
    timeout = config.get('HTTP_TIMEOUT_SEC', 120)
    if backend == 'openai':
        return OpenAISpeechToText(
            api_key=config.get('OPENAI_API_KEY'),
            base_url=config.get('OPENAI_BASE_URL') or 'https://api.openai.com/v1',
            model=config.get('STT_MODEL') or 'whisper-1',
            language=config.get('STT_LANGUAGE') or 'es',
            timeout=timeout,
        )
    if backend == 'deepgram':
        return DeepgramSpeechToText(
            api_key=config.get('DEEPGRAM_API_KEY'),
            language=config.get('STT_LANGUAGE') or 'es',
            timeout=timeout,
        )
    raise ConfigurationError(f'Unknown STT_BACKEND: {backend}')
