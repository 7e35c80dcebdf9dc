# SPDX-License-Identifier: MIT

import pytest

from bsdp.dhcp import dhcp_option_codecs
from bsdp.error import MalformedOption, OptionTooLarge
from bsdp.options import OptionMap, DHCP_OPTIONS_BUDGET, VENDOR_OPTIONS_BUDGET
from bsdp.vendor import bsdp_option_codecs, BSDPOptionType, BSDPMessageType


def vendor_map(values=None):
	return OptionMap(bsdp_option_codecs, VENDOR_OPTIONS_BUDGET, values)


def dhcp_map(values=None):
	return OptionMap(dhcp_option_codecs, DHCP_OPTIONS_BUDGET, values)


class TestEncode:
	def test_entries_then_end(self):
		options = vendor_map({1: b'\x01', 2: b'\x01\x01'})
		assert options.encode() == b'\x01\x01\x01\x02\x02\x01\x01\xff'

	def test_empty_table_is_only_end(self):
		assert vendor_map().encode() == b'\xff'

	def test_insertion_order_is_kept(self):
		options = vendor_map({9: b'', 3: b'', 200: b''})
		assert options.encode() == b'\x09\x00\x03\x00\xc8\x00\xff'

	def test_vendor_budget_is_inclusive(self):
		options = vendor_map({1: b'x'*253})
		assert len(options.encode()) == 256

	def test_unterminated(self):
		options = vendor_map({1: b'x'*253})
		encoded = options.encode(terminate=False)
		assert len(encoded) == 255
		assert OptionMap.decode(encoded, bsdp_option_codecs,
			VENDOR_OPTIONS_BUDGET).raw(1) == b'x'*253

	def test_vendor_budget_overflow(self):
		options = vendor_map({1: b'x'*200, 2: b'y'*52})
		with pytest.raises(OptionTooLarge):
			options.encode()

	def test_dhcp_budget(self):
		dhcp_map({1: b'x'*200, 2: b'y'*107}).encode()
		with pytest.raises(OptionTooLarge):
			dhcp_map({1: b'x'*200, 2: b'y'*108}).encode()

	def test_payload_longer_than_length_byte(self):
		with pytest.raises(OptionTooLarge):
			vendor_map().set_raw(1, b'x'*256)

	def test_end_code_is_not_an_option(self):
		with pytest.raises(ValueError):
			vendor_map().set_raw(255, b'')


class TestDecode:
	def test_stops_at_end(self):
		decoded = OptionMap.decode_bytes(b'\x01\x01\x02\xff\x03\x01\x01')
		assert decoded == {1: b'\x02'}

	def test_missing_end_ends_at_buffer_end(self):
		assert OptionMap.decode_bytes(b'\x01\x01\x02') == {1: b'\x02'}

	def test_pad_code_is_an_ordinary_option(self):
		assert OptionMap.decode_bytes(b'\x00\x01\x07\xff') == {0: b'\x07'}

	def test_last_occurrence_wins(self):
		decoded = OptionMap.decode_bytes(b'\x05\x01\x01\x05\x01\x02\xff')
		assert decoded == {5: b'\x02'}

	def test_length_past_end(self):
		with pytest.raises(MalformedOption) as excinfo:
			OptionMap.decode_bytes(b'\x08\x04\x01\x02')
		assert excinfo.value.code == 8
		assert excinfo.value.expected_length == 4

	def test_missing_length_byte(self):
		with pytest.raises(MalformedOption):
			OptionMap.decode_bytes(b'\x01\x01\x02\x06')

	def test_round_trip(self):
		options = vendor_map({0: b'', 1: b'\x01', 77: b'\xff'*20,
			254: b'abc'})
		decoded = OptionMap.decode(options.encode(), bsdp_option_codecs,
			VENDOR_OPTIONS_BUDGET)
		assert decoded == options
		assert list(decoded) == [0, 1, 77, 254]


class TestAccess:
	def test_typed_values(self):
		options = vendor_map()
		options[BSDPOptionType.MESSAGE_TYPE] = BSDPMessageType.SELECT
		options[BSDPOptionType.SERVER_PRIORITY] = 500
		assert options.raw(BSDPOptionType.MESSAGE_TYPE) == b'\x02'
		assert options[BSDPOptionType.MESSAGE_TYPE] == BSDPMessageType.SELECT
		assert options[BSDPOptionType.SERVER_PRIORITY] == 500
		assert len(options) == 2

	def test_unknown_code_decodes_to_none(self):
		options = vendor_map({200: b'\x01\x02'})
		assert 200 in options
		assert options[200] is None
		assert options.raw(200) == b'\x01\x02'

	def test_get_default_only_when_absent(self):
		options = vendor_map()
		assert options.get(BSDPOptionType.REPLY_PORT, 68) == 68
		options[BSDPOptionType.REPLY_PORT] = 1000
		assert options.get(BSDPOptionType.REPLY_PORT, 68) == 1000

	def test_malformed_payload_on_access(self):
		options = vendor_map({BSDPOptionType.SERVER_PRIORITY: b'\x01'})
		with pytest.raises(MalformedOption) as excinfo:
			options[BSDPOptionType.SERVER_PRIORITY]
		assert excinfo.value.code == BSDPOptionType.SERVER_PRIORITY
		assert excinfo.value.expected_length == 2

	def test_delete(self):
		options = vendor_map({1: b'\x01'})
		del options[1]
		assert 1 not in options
		assert options.size() == 0

	def test_repr_shows_decoded_values(self):
		options = vendor_map()
		options[BSDPOptionType.SERVER_PRIORITY] = 500
		assert 'SERVER_PRIORITY' in repr(options)
		assert '500' in repr(options)

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
