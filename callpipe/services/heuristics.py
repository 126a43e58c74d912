"""Lexical sale-outcome heuristic used when no language model answers.

Deterministic: the same transcript and indicator lists always give the same
outcome.
"""
import re
from typing import Iterable, Optional

REASON_NOT_INTERESTED = 'El cliente no mostró interés en comprar.'
REASON_NO_AMOUNT = 'No se mencionó un monto específico para la venta.'
REASON_NO_SIGNAL = 'No se identificaron indicadores claros de una venta exitosa.'

# number followed by a "million" or currency unit
AMOUNT_PATTERN = re.compile(
    r'(\d+(?:\.\d+)?)\s*(millones|mill[oó]n|pesos?|m)\b',
    re.IGNORECASE,
)
MILLION_UNITS = ('millones', 'millón', 'millon')


def split_indicators(value) -> list:
    """Accept a comma separated string or an iterable of phrases."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [v.strip().lower() for v in value if v and v.strip()]


def extract_amount(transcript: str) -> Optional[int]:
    m = AMOUNT_PATTERN.search(transcript or '')
    if not m:
        return None
    amount = float(m.group(1))
    if m.group(2).lower() in MILLION_UNITS:
        amount *= 1_000_000
    return int(round(amount))


def _contains_any(text: str, indicators: Iterable[str]) -> bool:
    # whole words only: "si" must not match inside "necesito"
    return any(re.search(r'(?<!\w)' + re.escape(i) + r'(?!\w)', text) for i in indicators)


def basic_analysis(transcript: str, positive: Iterable[str], negative: Iterable[str]) -> dict:
    lowered = (transcript or '').lower()
    amount = extract_amount(transcript)
    has_positive = _contains_any(lowered, positive)
    has_negative = _contains_any(lowered, negative)

    if has_negative and not has_positive:
        return {'successSell': False, 'amountToPay': None, 'reasonFail': REASON_NOT_INTERESTED}
    if has_positive and amount is not None:
        return {'successSell': True, 'amountToPay': amount, 'reasonFail': None}
    if has_positive:
        return {'successSell': False, 'amountToPay': None, 'reasonFail': REASON_NO_AMOUNT}
    return {'successSell': False, 'amountToPay': None, 'reasonFail': REASON_NO_SIGNAL}
