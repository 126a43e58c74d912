"""Prompt construction and response validation for sale-outcome analysis."""
import json
import re
from typing import Any, Dict

from ..errors import ValidationError

USER_PROMPT = 'Analiza la siguiente transcripción de llamada de ventas:\n\n{transcription}'
CLOSING_INSTRUCTION = 'Responde ÚNICAMENTE con el JSON válido, sin texto adicional.'

_JSON_BLOCK = re.compile(r'\{[\s\S]*\}')


def _dump(value):
    return json.dumps(value if value is not None else {}, ensure_ascii=False, indent=2)


def build_system_prompt(config: Dict[str, Any]) -> str:
    """Render a project's AnalysisConfig as the system message.

    Order: instructions, output schema, field descriptions, a successful and
    a failed worked example, then the JSON-only instruction.
    """
    config = config or {}
    instructions = '\n'.join(config.get('instructions') or [])
    fields = '\n'.join(f'- {key}: {desc}' for key, desc in (config.get('fields') or {}).items())

    return f"""{instructions}

{_dump(config.get('output_format'))}

Campos requeridos:
{fields}

Ejemplos de análisis:

Ejemplo 1 (venta exitosa):
{_dump(config.get('example_analysis'))}

Ejemplo 2 (venta fallida):
{_dump(config.get('example_analysis_fail'))}

{CLOSING_INSTRUCTION}"""


def build_user_prompt(transcription: str) -> str:
    return USER_PROMPT.format(transcription=transcription)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_analysis_result(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError('Invalid analysis result: expected a JSON object')
    for key in ('successSell', 'amountToPay', 'reasonFail'):
        if key not in data:
            raise ValidationError(f'Invalid analysis result: missing {key}')
    if not isinstance(data['successSell'], bool):
        raise ValidationError('Invalid analysis result: successSell must be a boolean')
    if data['amountToPay'] is not None and not _is_number(data['amountToPay']):
        raise ValidationError('Invalid analysis result: amountToPay must be a number or null')
    if data['reasonFail'] is not None and not isinstance(data['reasonFail'], str):
        raise ValidationError('Invalid analysis result: reasonFail must be a string or null')
    return {
        'successSell': data['successSell'],
        'amountToPay': data['amountToPay'],
        'reasonFail': data['reasonFail'],
    }


def parse_analysis_response(content: str) -> Dict[str, Any]:
    """Parse and validate a model reply.

    Models sometimes wrap the object in prose or code fences, so the first
    ``{...}`` block is tried when the whole reply is not JSON.
    """
    if not content or not content.strip():
        raise ValidationError('Empty response from language model')
    try:
        data = json.loads(content)
    except ValueError:
        m = _JSON_BLOCK.search(content)
        if not m:
            raise ValidationError('Language model response is not JSON')
        try:
            data = json.loads(m.group(0))
        except ValueError:
            raise ValidationError('Language model response is not JSON')
    return validate_analysis_result(data)
