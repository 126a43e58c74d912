import pytest

from callpipe.errors import ParseError
from callpipe.services.filename import (
    GRAMMAR_LEGACY,
    parse_filename,
    parse_filename_structure,
    parse_legacy_filename,
)


def test_v1_parses_all_fields():
    out = parse_filename_structure('1700000000_DEV1_sale_John_5551234')
    assert out == {
        'timestamp': 1700000000,
        'callerId': 'DEV1',
        'type': 'sale',
        'targetName': 'John',
        'targetNumber': '5551234',
    }


def test_v1_ignores_extension_and_extra_parts():
    out = parse_filename_structure('1700000000_DEV1_sale_John_5551234_extra_bits.wav')
    assert out['timestamp'] == 1700000000
    assert out['targetNumber'] == '5551234'


def test_v1_too_few_parts_yields_null_descriptor():
    out = parse_filename_structure('1700000000_DEV1_sale.wav')
    assert all(v is None for v in out.values())


def test_v1_non_numeric_timestamp():
    out = parse_filename_structure('abc_DEV1_sale_John_5551234.mp3')
    assert out['timestamp'] is None
    assert out['callerId'] == 'DEV1'


def test_legacy_strips_brackets():
    out = parse_legacy_filename('1700000000_user7_out_[Ana Perez]_[5550001]_20240101.mp3')
    assert out['timestamp'] == 1700000000
    assert out['userId'] == 'user7'
    assert out['type'] == 'out'
    assert out['contactName'] == 'Ana Perez'
    assert out['contactPhone'] == '5550001'
    assert out['date'] == '20240101'
    assert out['originalFilename'] == '1700000000_user7_out_[Ana Perez]_[5550001]_20240101.mp3'


@pytest.mark.parametrize('name', [
    '1700000000_DEV1_sale_John_5551234.wav',
    'x_user7_out_[Ana]_[555]_20240101.wav',
])
def test_legacy_rejects_bad_names(name):
    with pytest.raises(ParseError):
        parse_legacy_filename(name)


def test_dispatch_by_grammar():
    assert parse_filename('1_a_b_c_d')['callerId'] == 'a'
    assert parse_filename('1_u_t_[n]_[p]_d', grammar=GRAMMAR_LEGACY)['contactName'] == 'n'
    with pytest.raises(ValueError):
        parse_filename('1_a_b_c_d', grammar='v9')
