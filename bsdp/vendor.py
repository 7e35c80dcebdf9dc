# SPDX-License-Identifier: MIT

__all__ = [
	'BSDPOptionType', 'BSDPMessageType', 'ImageKind', 'ImageRef',
	'ImageFilter', 'BSDPVersion', 'bsdp_option_codecs', 'bsdp_option_codec',
	'encode_image_ref', 'decode_image_ref', 'SERVER_PRIORITY'
]

import enum
from collections import namedtuple
from struct import Struct

from .error import MalformedOption
from .option_codecs import (Codec, CodecRegistry, make_guarded, make_fixed,
	uint8, empty_codec, ip_codec, string_codec, uint16_codec)

SERVER_PRIORITY = 500


@enum.unique
class BSDPOptionType(enum.IntEnum):
	MESSAGE_TYPE = 1
	VERSION = 2
	SERVER_IDENTIFIER = 3
	SERVER_PRIORITY = 4
	REPLY_PORT = 5
	BOOT_IMAGE_LIST_PATH = 6
	DEFAULT_BOOT_IMAGE_ID = 7
	SELECTED_BOOT_IMAGE_ID = 8
	BOOT_IMAGE_LIST = 9
	NETBOOT_1_0_FIRMWARE = 10
	BOOT_IMAGE_ATTRIBUTES_FILTER_LIST = 11
	# NOTE: diskless extensions, sent by the server only
	SHADOW_MOUNT_PATH = 128
	SHADOW_FILE_PATH = 129
	MACHINE_NAME = 130


@enum.unique
class BSDPMessageType(enum.IntEnum):
	LIST = 1
	SELECT = 2
	FAILED = 3


@enum.unique
class ImageKind(enum.IntEnum):
	MACOS9 = 0x00
	MACOSX = 0x01
	MACOSXSERVER = 0x02
	HARDWAREDIAGNOSTICS = 0x03
	EFI_PROGRAM = 0x0D


BSDPVersion = namedtuple('BSDPVersion', 'major minor', defaults=(1, 1))

ImageRef = namedtuple('ImageRef', 'install kind index')
ImageFilter = namedtuple('ImageFilter', 'install kind')

# NOTE: attribute byte, reserved byte, big endian index
image_ref_struct = Struct('!BxH')

INSTALL_BIT = 0x80
KIND_MASK = 0x7F


def encode_attributes(install, kind):
	return (INSTALL_BIT if install else 0) | ImageKind(kind)


def decode_attributes(attributes):
	return bool(attributes & INSTALL_BIT), ImageKind(attributes & KIND_MASK)


def encode_image_ref(decoded):
	install, kind, index = decoded
	if index not in range(0x10000):
		raise ValueError('image index %r not in range(0x10000)' % (index,))
	return image_ref_struct.pack(encode_attributes(install, kind), index)


def decode_image_ref(encoded):
	attributes, index = image_ref_struct.unpack(encoded)
	install, kind = decode_attributes(attributes)
	return ImageRef(install, kind, index)


def encode_message_type(decoded):
	return uint8.pack(BSDPMessageType(decoded))


def decode_message_type(encoded):
	value, = uint8.unpack(encoded)
	try:
		return BSDPMessageType(value)
	except ValueError:
		return value


def encode_version(decoded):
	major, minor = decoded
	return bytes([major, minor])


def decode_version(encoded):
	return BSDPVersion(*encoded)


def encode_boot_image_list(decoded):
	encoded = b''
	for ref, description in decoded.items():
		data = description.encode('utf-8')
		if len(data) > 0xFF:
			raise ValueError('description too long: %r' % description)
		encoded += encode_image_ref(ref) + bytes([len(data)]) + data
	return encoded


def decode_boot_image_list(encoded):
	# NOTE: image ref plus length byte, with an empty description
	minimum = image_ref_struct.size + 1
	decoded = {}
	position = 0
	while position < len(encoded):
		if len(encoded) - position < minimum:
			raise MalformedOption('%d trailing byte(s) cannot hold a boot'
				' image entry' % (len(encoded) - position))
		ref = decode_image_ref(encoded[position:position + 4])
		length = encoded[position + 4]
		start = position + minimum
		if start + length > len(encoded):
			raise MalformedOption('description of image %d declares %d'
				' bytes, only %d remain'
				% (ref.index, length, len(encoded) - start))
		decoded[ref] = encoded[start:start + length].decode('utf-8')
		position = start + length
	return decoded


def encode_filter_list(decoded):
	return b''.join(
		bytes([encode_attributes(install, kind), 0])
		for install, kind in decoded
	)


def decode_filter_list(encoded):
	if len(encoded) % 2 != 0:
		raise MalformedOption('filter list length %d is not a multiple of 2'
			% len(encoded))
	return [
		ImageFilter(*decode_attributes(encoded[i]))
		for i in range(0, len(encoded), 2)
	]


image_ref_codec = (encode_image_ref, make_fixed(decode_image_ref, 4))

bsdp_option_codec = Codec(
	name='bsdp',
	codecs={
		BSDPOptionType.MESSAGE_TYPE: (
			encode_message_type,
			make_fixed(decode_message_type, 1)
		),
		BSDPOptionType.VERSION: (encode_version, make_fixed(decode_version, 2)),
		BSDPOptionType.SERVER_IDENTIFIER: ip_codec,
		BSDPOptionType.SERVER_PRIORITY: uint16_codec,
		BSDPOptionType.REPLY_PORT: (
			make_guarded(uint16_codec[0], lambda n: n in range(1024),
				'reply port must be a privileged port (0-1023)'),
			uint16_codec[1]
		),
		BSDPOptionType.BOOT_IMAGE_LIST_PATH: string_codec,
		BSDPOptionType.DEFAULT_BOOT_IMAGE_ID: image_ref_codec,
		BSDPOptionType.SELECTED_BOOT_IMAGE_ID: image_ref_codec,
		BSDPOptionType.BOOT_IMAGE_LIST: (
			encode_boot_image_list,
			decode_boot_image_list
		),
		BSDPOptionType.NETBOOT_1_0_FIRMWARE: empty_codec,
		BSDPOptionType.BOOT_IMAGE_ATTRIBUTES_FILTER_LIST: (
			encode_filter_list,
			decode_filter_list
		),
		BSDPOptionType.SHADOW_MOUNT_PATH: string_codec,
		BSDPOptionType.SHADOW_FILE_PATH: string_codec,
		BSDPOptionType.MACHINE_NAME: string_codec,
	}
)

bsdp_option_codecs = CodecRegistry('bsdp')
bsdp_option_codecs.register(bsdp_option_codec)

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
