"""
Tests for response envelope unwrapping and record normalization.
"""

import logging

import pytest

from webapp.schemas import RecordSchema, extract_items, extract_record, normalize_records, schema_for
from webapp.schemas.records import ApartmentSchema, LookupSchema, PaymentSchema, TowerSchema

ROWS = [{'Tower_id': 1}, {'Tower_id': 2}]


class TestExtractItems:

    @pytest.mark.parametrize('payload', [
        ROWS,
        {'towers': ROWS},
        {'data': ROWS},
        {'success': True, 'data': {'towers': ROWS}},
        {'items': ROWS},
        {'data': {'results': ROWS}},
    ])
    def test_shapes(self, payload):
        assert extract_items(payload, ['towers']) == ROWS

    def test_resource_key_wins_over_data_list(self):
        payload = {'towers': ROWS, 'data': [{'other': True}]}
        assert extract_items(payload, ['towers']) == ROWS

    def test_keys_tried_in_order(self):
        payload = {'parkings': ROWS}
        assert extract_items(payload, ['parking', 'parkings']) == ROWS

    def test_none(self):
        assert extract_items(None) == []

    def test_unrecognized_shape_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger='webapp.schemas.envelope'):
            assert extract_items({'message': 'ok'}, ['towers']) == []
        assert 'No list found' in caplog.text

    def test_scalar_payload(self):
        assert extract_items('oops') == []


class TestExtractRecord:

    def test_bare_object(self):
        assert extract_record({'Tower_id': 1}) == {'Tower_id': 1}

    def test_keyed(self):
        assert extract_record({'tower': {'Tower_id': 1}}, 'tower') == {'Tower_id': 1}

    def test_data_wrapped(self):
        assert extract_record({'success': True, 'data': {'Tower_id': 1}}) == {'Tower_id': 1}

    def test_data_keyed(self):
        assert extract_record({'data': {'tower': {'Tower_id': 1}}}, 'tower') == {'Tower_id': 1}

    def test_acknowledgement_only(self):
        assert extract_record({'success': True, 'message': 'Deleted'}) is None

    def test_not_an_object(self):
        assert extract_record([{'Tower_id': 1}]) is None
        assert extract_record(None) is None


class TestSchemas:

    def test_aliases_fill_canonical_fields(self):
        record = ApartmentSchema().load({
            'Apartment_id': 10,
            'Apartment_number': '101',
            'Tower_name': 'Torre A',
            'Apartment_status_name': 'Ocupado',
            'Owner_FK_ID': 3,
        })
        assert record['id'] == 10
        assert record['number'] == '101'
        assert record['tower'] == 'Torre A'
        assert record['status'] == 'Ocupado'
        assert record['owner_id'] == 3

    def test_unknown_fields_kept(self):
        record = TowerSchema().load({'Tower_id': 1, 'floors': 12})
        assert record['floors'] == 12
        assert record['Tower_id'] == 1

    def test_canonical_value_not_overwritten(self):
        record = TowerSchema().load({'id': 5, 'Tower_id': 1})
        assert record['id'] == 5

    def test_empty_alias_skipped(self):
        record = PaymentSchema().load({'Payment_total_payment': '', 'amount': 150000})
        assert record['total'] == 150000

    def test_to_backend(self):
        body = TowerSchema().to_backend({'name': 'Torre C', 'floors': 8})
        assert body == {'Tower_name': 'Torre C', 'floors': 8}

    def test_lookup_suffixes(self):
        record = LookupSchema().load({'Vehicle_type_id': 2, 'Vehicle_type_name': 'Moto'})
        assert record['id'] == 2
        assert record['name'] == 'Moto'

    def test_lookup_to_backend_is_identity(self):
        assert LookupSchema().to_backend({'name': 'Moto'}) == {'name': 'Moto'}

    def test_schema_for(self):
        assert isinstance(schema_for('towers'), TowerSchema)
        assert isinstance(schema_for('vehicle-types'), LookupSchema)
        assert isinstance(schema_for('towers'), RecordSchema)


class TestNormalizeRecords:

    def test_skips_non_objects(self, caplog):
        with caplog.at_level(logging.WARNING, logger='webapp.schemas'):
            records = normalize_records([{'Tower_id': 1}, 'junk', None], TowerSchema())
        assert records == [{'id': 1, 'Tower_id': 1}]
        assert 'non-object' in caplog.text

    def test_empty(self):
        assert normalize_records([], TowerSchema()) == []
