# SPDX-License-Identifier: MIT

from ipaddress import IPv4Address

import pytest

from bsdp.dhcp import DHCPOptionType, MessageType, DHCP_MAGIC_COOKIE
from bsdp.error import FieldTooLong, MalformedOption, OptionTooLarge
from bsdp.message import BSDPMessage, Operation, HardwareType, Flags
from bsdp.vendor import (BSDPOptionType, BSDPMessageType, BSDPVersion,
	ImageKind, ImageRef)

HEADER_SIZE = 236


def make_message():
	message = BSDPMessage(op=Operation.REPLY, xid=0xDEADBEEF, secs=3,
		flags=Flags.BROADCAST, ciaddr='10.0.0.23', siaddr='10.0.0.1',
		hwaddr=bytes.fromhex('001122334455'), sname='server',
		file='apple/image.nbi/i386/booter')
	message.message_type = MessageType.ACK
	message.options[DHCPOptionType.ROOT_PATH] = 'nfs:10.0.0.1:/images'
	message.vendor_options[BSDPOptionType.MESSAGE_TYPE] = \
		BSDPMessageType.SELECT
	message.vendor_options[BSDPOptionType.VERSION] = BSDPVersion(1, 1)
	message.vendor_options[BSDPOptionType.SELECTED_BOOT_IMAGE_ID] = \
		ImageRef(False, ImageKind.MACOSX, 42)
	return message


class TestBSDPMessage:
	def test_vendor_class_is_always_set(self):
		message = BSDPMessage()
		assert message.vendor_class == 'AAPLBSDPC'
		assert message.options.raw(DHCPOptionType.VENDOR_CLASS_IDENTIFIER) \
			== b'AAPLBSDPC'

	def test_round_trip(self):
		message = make_message()
		decoded = BSDPMessage.decode(message.encode())
		assert decoded.operation == Operation.REPLY
		assert decoded.hardware_type == HardwareType.ETH10MB
		assert decoded.transaction_id == 0xDEADBEEF
		assert decoded.seconds == 3
		assert decoded.flags & Flags.BROADCAST
		assert decoded.client_ip == IPv4Address('10.0.0.23')
		assert decoded.your_ip == IPv4Address('0.0.0.0')
		assert decoded.server_ip == IPv4Address('10.0.0.1')
		assert decoded.hardware_address == bytes.fromhex('001122334455')
		assert decoded.server_name == 'server'
		assert decoded.boot_file_name == 'apple/image.nbi/i386/booter'
		assert decoded.message_type == MessageType.ACK
		assert decoded.options[DHCPOptionType.ROOT_PATH] == \
			'nfs:10.0.0.1:/images'
		assert decoded.vendor_options == message.vendor_options
		assert decoded.vendor_options[
			BSDPOptionType.SELECTED_BOOT_IMAGE_ID].index == 42

	def test_layout(self):
		encoded = make_message().encode()
		assert encoded[0] == Operation.REPLY
		assert encoded[2] == 6
		assert encoded[HEADER_SIZE:HEADER_SIZE + 4] == DHCP_MAGIC_COOKIE
		assert encoded[-1] == 0xFF

	def test_vendor_table_lives_in_option_43(self):
		message = make_message()
		message.encode()
		assert message.options.raw(
			DHCPOptionType.VENDOR_SPECIFIC_INFORMATION) == \
			message.vendor_options.encode()

	def test_mac_address(self):
		assert make_message().mac_address == '00:11:22:33:44:55'

	def test_missing_vendor_option_is_empty_table(self):
		header = BSDPMessage().encode()[:HEADER_SIZE + 4]
		decoded = BSDPMessage.decode(header + b'\x35\x01\x08\xff')
		assert decoded.message_type == MessageType.INFORM
		assert len(decoded.vendor_options) == 0

	def test_inner_overrun(self):
		header = BSDPMessage().encode()[:HEADER_SIZE + 4]
		with pytest.raises(MalformedOption):
			BSDPMessage.decode(header + b'\x2b\x03\x01\x05\x01\xff')

	def test_truncated_datagram(self):
		with pytest.raises(MalformedOption):
			BSDPMessage.decode(b'\x01\x01\x06\x00')

	def test_bad_cookie_warns(self):
		encoded = bytearray(make_message().encode())
		encoded[HEADER_SIZE] = 0
		with pytest.warns(UserWarning):
			BSDPMessage.decode(bytes(encoded))

	def test_server_name_length(self):
		message = BSDPMessage()
		message.server_name = 'x'*64
		with pytest.raises(FieldTooLong):
			message.server_name = 'x'*65

	def test_boot_file_name_length(self):
		message = BSDPMessage()
		message.boot_file_name = 'x'*128
		with pytest.raises(FieldTooLong):
			message.boot_file_name = 'x'*129

	def test_fixed_fields_are_ascii(self):
		with pytest.raises(ValueError):
			BSDPMessage().server_name = 'caf\xe9'

	def test_fixed_fields_are_zero_padded(self):
		message = BSDPMessage(sname='abc')
		assert message.raw_data['sname'] == b'abc' + b'\0'*61

	def test_hardware_address_too_long(self):
		with pytest.raises(FieldTooLong):
			BSDPMessage(hwaddr=b'\x01'*17)

	def test_vendor_table_over_budget(self):
		message = BSDPMessage()
		message.vendor_options[BSDPOptionType.BOOT_IMAGE_LIST_PATH] = 'x'*200
		message.vendor_options[BSDPOptionType.MACHINE_NAME] = 'y'*60
		with pytest.raises(OptionTooLarge):
			message.encode()

	def test_full_vendor_table_has_no_end(self):
		message = BSDPMessage()
		message.vendor_options[BSDPOptionType.BOOT_IMAGE_LIST_PATH] = 'x'*253
		assert message.vendor_options.size() == 255
		decoded = BSDPMessage.decode(message.encode())
		assert len(message.options.raw(
			DHCPOptionType.VENDOR_SPECIFIC_INFORMATION)) == 255
		assert decoded.vendor_options[
			BSDPOptionType.BOOT_IMAGE_LIST_PATH] == 'x'*253

	def test_space_padded_fixed_fields(self):
		message = make_message()
		message.raw_data['sname'] = b'server' + b' '*58
		message.raw_data['file'] = b'booter' + b' '*10 + b'\0'*112
		decoded = BSDPMessage.decode(message.encode())
		assert decoded.server_name == 'server'
		assert decoded.boot_file_name == 'booter'

	def test_repr(self):
		text = repr(make_message())
		assert text.startswith('BSDPMessage(')
		assert 'SELECTED_BOOT_IMAGE_ID' in text

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
