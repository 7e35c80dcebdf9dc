# SPDX-License-Identifier: MIT

__all__ = ['DHCPOptionType', 'MessageType', 'dhcp_option_codecs',
	'dhcp_option_codec', 'DHCP_MAGIC_COOKIE', 'VENDOR_CLASS']

import enum

from .option_codecs import (Codec, CodecRegistry, make_guarded, make_fixed,
	uint8, ip_codec, string_codec, bytes_codec, uint16_codec)

DHCP_MAGIC_COOKIE = b'\x63\x82\x53\x63'

# NOTE: clients send `AAPLBSDPC/<arch>/<model>`, servers answer with the
# bare prefix
VENDOR_CLASS = 'AAPLBSDPC'


@enum.unique
class DHCPOptionType(enum.IntEnum):
	PAD = 0
	HOST_NAME = 12
	ROOT_PATH = 17
	VENDOR_SPECIFIC_INFORMATION = 43
	MESSAGE_TYPE = 53
	SERVER_IDENTIFIER = 54
	PARAMETER_REQUEST_LIST = 55
	MAXIMUM_DHCP_MESSAGE_SIZE = 57
	VENDOR_CLASS_IDENTIFIER = 60
	CLIENT_IDENTIFIER = 61
	TFTP_SERVER_NAME = 66
	BOOTFILE_NAME = 67
	END = 255


@enum.unique
class MessageType(enum.IntEnum):
	DISCOVER = 1
	OFFER = 2
	REQUEST = 3
	DECLINE = 4
	ACK = 5
	NAK = 6
	RELEASE = 7
	INFORM = 8


def encode_message_type(decoded):
	return uint8.pack(MessageType(decoded))


def decode_message_type(encoded):
	value, = uint8.unpack(encoded)
	try:
		return MessageType(value)
	except ValueError:
		return value


nonempty_string_codec = (
	make_guarded(string_codec[0], lambda s: len(s) > 0,
		'string options must not be empty'),
	string_codec[1]
)

dhcp_option_codec = Codec(
	name='dhcp',
	codecs={
		DHCPOptionType.HOST_NAME: nonempty_string_codec,
		DHCPOptionType.ROOT_PATH: nonempty_string_codec,
		DHCPOptionType.VENDOR_SPECIFIC_INFORMATION: (
			make_guarded(lambda v: bytes(v),
				lambda v: DHCP_MAGIC_COOKIE not in bytes(v),
				'dhcp magic cookie must not exist in vendor specific data'),
			bytes
		),
		DHCPOptionType.MESSAGE_TYPE: (
			encode_message_type,
			make_fixed(decode_message_type, 1)
		),
		DHCPOptionType.SERVER_IDENTIFIER: ip_codec,
		DHCPOptionType.PARAMETER_REQUEST_LIST: bytes_codec,
		DHCPOptionType.MAXIMUM_DHCP_MESSAGE_SIZE: (
			make_guarded(uint16_codec[0], lambda n: n >= 576,
				'maximum DHCP message size must be at least 576'),
			uint16_codec[1]
		),
		DHCPOptionType.VENDOR_CLASS_IDENTIFIER: nonempty_string_codec,
		DHCPOptionType.CLIENT_IDENTIFIER: (
			make_guarded(lambda v: bytes(v), lambda v: len(v) > 1),
			bytes
		),
		DHCPOptionType.TFTP_SERVER_NAME: nonempty_string_codec,
		DHCPOptionType.BOOTFILE_NAME: nonempty_string_codec,
	}
)

dhcp_option_codecs = CodecRegistry('dhcp')
dhcp_option_codecs.register(dhcp_option_codec)

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
