# SPDX-License-Identifier: MIT

__all__ = ['Operation', 'HardwareType', 'Flags', 'BSDPMessage',
	'format_hardware_address']

import enum
import struct
from collections import namedtuple
from ipaddress import IPv4Address
from random import randrange
from warnings import warn

from .dhcp import (DHCPOptionType, dhcp_option_codecs, DHCP_MAGIC_COOKIE,
	VENDOR_CLASS)
from .error import FieldTooLong, MalformedOption
from .options import OptionMap, DHCP_OPTIONS_BUDGET, VENDOR_OPTIONS_BUDGET
from .vendor import bsdp_option_codecs


@enum.unique
class Operation(enum.IntEnum):
	REQUEST = 1
	REPLY = 2


# NOTE: every NetBoot client is ethernet or close enough to it
@enum.unique
class HardwareType(enum.IntEnum):
	ETH10MB = 1
	IEEE802 = 6


@enum.unique
class Flags(enum.IntFlag):
	BROADCAST = 1 << 15


def format_hardware_address(address):
	return ':'.join('%02x' % octet for octet in address)


class BSDPMessage:
	"""A DHCP frame carrying BSDP options in its vendor-specific option

	The DHCP options live in `options`; the table nested inside option 43
	lives in `vendor_options` and is written back into option 43 by
	`encode()`.
	"""

	NAMES = namedtuple('Fields', 'op htype hlen hops xid secs flags ciaddr'
		' yiaddr siaddr giaddr chaddr sname file', defaults=(None,)*14)
	CODEC = struct.Struct(
		'!'			# network byte order (big)
		'BBBB'		# op, htype, hlen, hops
		'I'			# xid
		'HH'		# secs, flags
		'4s'		# ciaddr (client ip)
		'4s'		# yiaddr (given ip by server)
		'4s'		# siaddr (server ip address)
		'4s'		# giaddr (gateway ip address)
		'16s'		# chaddr (client hardware address)
		'64s'		# server host name (null-terminated)
		'128s'		# boot file name (null-terminated)
		# '4s'		# magic cookie, followed by the options
	)

	@property
	def operation(self):
		return Operation(self.raw_data['op'])

	@operation.setter
	def operation(self, value):
		self.raw_data['op'] = Operation(value).value

	@property
	def hardware_type(self):
		try:
			return HardwareType(self.raw_data['htype'])
		except ValueError:
			return self.raw_data['htype']

	@hardware_type.setter
	def hardware_type(self, value):
		if value not in range(0x100):
			raise ValueError('`%r` not in range(0x100)' % (value,))
		self.raw_data['htype'] = int(value)

	@property
	def hardware_address(self):
		return self.raw_data['chaddr'][:self.raw_data['hlen']]

	@hardware_address.setter
	def hardware_address(self, value):
		if len(value) > 16:
			raise FieldTooLong('hardware address too long: `%r`' % (value,))
		self.raw_data['chaddr'] = (
			bytes(value) + b'\0'*16
		)[:16]
		self.raw_data['hlen'] = len(value)

	@property
	def mac_address(self):
		return format_hardware_address(self.hardware_address)

	@property
	def hops(self):
		return self.raw_data['hops']

	@hops.setter
	def hops(self, value):
		if value not in range(0x100):
			raise ValueError('`%r` not in range(0x100)' % (value,))
		self.raw_data['hops'] = value

	@property
	def transaction_id(self):
		return self.raw_data['xid']

	@transaction_id.setter
	def transaction_id(self, value):
		if value not in range(0x100000000):
			raise ValueError('`%r` not in range(0x100000000)' % (value,))
		self.raw_data['xid'] = value

	@property
	def seconds(self):
		return self.raw_data['secs']

	@seconds.setter
	def seconds(self, value):
		if value not in range(0x10000):
			raise ValueError('`%r` not in range(0x10000)' % (value,))
		self.raw_data['secs'] = value

	@property
	def flags(self):
		return Flags(self.raw_data['flags'])

	@flags.setter
	def flags(self, value):
		if value not in range(0x10000):
			raise ValueError('`%r` not in range(0x10000)' % (value,))
		self.raw_data['flags'] = int(value)

	@property
	def client_ip(self):
		return IPv4Address(self.raw_data['ciaddr'])

	@client_ip.setter
	def client_ip(self, value):
		self.raw_data['ciaddr'] = IPv4Address(value).packed

	@property
	def your_ip(self):
		return IPv4Address(self.raw_data['yiaddr'])

	@your_ip.setter
	def your_ip(self, value):
		self.raw_data['yiaddr'] = IPv4Address(value).packed

	@property
	def server_ip(self):
		return IPv4Address(self.raw_data['siaddr'])

	@server_ip.setter
	def server_ip(self, value):
		self.raw_data['siaddr'] = IPv4Address(value).packed

	@property
	def gateway_ip(self):
		return IPv4Address(self.raw_data['giaddr'])

	@gateway_ip.setter
	def gateway_ip(self, value):
		self.raw_data['giaddr'] = IPv4Address(value).packed

	@staticmethod
	def pack_string(name, value, size):
		try:
			data = value.encode('ascii')
		except UnicodeEncodeError:
			raise ValueError('%s must be ascii: `%r`' % (name, value)) from None
		if len(data) > size:
			raise FieldTooLong('%s too long (%d > %d): `%r`'
				% (name, len(data), size, value))
		return data + b'\0'*(size - len(data))

	@staticmethod
	def unpack_string(name, data):
		try:
			return data.rstrip(b'\0 ').decode('ascii')
		except UnicodeDecodeError:
			raise MalformedOption('%s is not ascii: `%r`'
				% (name, data)) from None

	@property
	def server_name(self):
		return self.unpack_string('server name', self.raw_data['sname'])

	@server_name.setter
	def server_name(self, value):
		self.raw_data['sname'] = self.pack_string('server name', value, 64)

	@property
	def boot_file_name(self):
		return self.unpack_string('boot file name', self.raw_data['file'])

	@boot_file_name.setter
	def boot_file_name(self, value):
		self.raw_data['file'] = self.pack_string('boot file name', value, 128)

	@property
	def message_type(self):
		return self.options.get(DHCPOptionType.MESSAGE_TYPE)

	@message_type.setter
	def message_type(self, value):
		self.options[DHCPOptionType.MESSAGE_TYPE] = value

	@property
	def vendor_class(self):
		return self.options.get(DHCPOptionType.VENDOR_CLASS_IDENTIFIER)

	def __init__(self, *, op=Operation.REQUEST, htype=HardwareType.ETH10MB,
		hops=0, xid=None, secs=0, flags=0, ciaddr=0, yiaddr=0, siaddr=0,
		giaddr=0, hwaddr=b'\x00\x00\x00\x00\x00\x00', sname='', file=''):
		self.raw_data = self.NAMES()._asdict()
		self.operation = op
		self.hardware_type = htype
		self.hops = hops
		if xid is None:
			xid = randrange(0x100000000)
		self.transaction_id = xid
		self.seconds = secs
		self.flags = flags
		self.client_ip = ciaddr
		self.your_ip = yiaddr
		self.server_ip = siaddr
		self.gateway_ip = giaddr
		self.hardware_address = hwaddr
		self.server_name = sname
		self.boot_file_name = file
		self.options = OptionMap(dhcp_option_codecs, DHCP_OPTIONS_BUDGET)
		self.vendor_options = OptionMap(bsdp_option_codecs,
			VENDOR_OPTIONS_BUDGET)
		self.options[DHCPOptionType.VENDOR_CLASS_IDENTIFIER] = VENDOR_CLASS

	def _repr_parts(self):
		return (
			'operation={op}'.format(op=self.operation),
			'hardware_type={htype}'.format(htype=self.hardware_type),
			'hardware_address={hwaddr}'.format(hwaddr=self.mac_address),
			'hops={hops}'.format(hops=hex(self.hops)),
			'transaction_id={xid}'.format(xid=hex(self.transaction_id)),
			'seconds={secs}'.format(secs=self.seconds),
			'flags={flags}'.format(flags=hex(self.raw_data['flags'])),
			'client_ip={ciaddr}'.format(ciaddr=self.client_ip),
			'your_ip={yiaddr}'.format(yiaddr=self.your_ip),
			'server_ip={siaddr}'.format(siaddr=self.server_ip),
			'gateway_ip={giaddr}'.format(giaddr=self.gateway_ip),
			'server_name={sname!r}'.format(sname=self.raw_data['sname']
				.rstrip(b'\0 ')),
			'boot_file_name={file!r}'.format(file=self.raw_data['file']
				.rstrip(b'\0 ')),
			'options={options!r}'.format(options=self.options),
			'vendor_options={options!r}'.format(options=self.vendor_options)
		)

	def __repr__(self):
		return '{cls}({parts})'.format(
			cls=type(self).__name__,
			parts=','.join(self._repr_parts())
		)

	def encode(self):
		# NOTE: a full vendor table ends where option 43 ends (RFC 2132 8.4)
		self.options.set_raw(DHCPOptionType.VENDOR_SPECIFIC_INFORMATION,
			self.vendor_options.encode(terminate=self.vendor_options.size()
				< VENDOR_OPTIONS_BUDGET))
		ordered_data = [self.raw_data[field] for field in self.NAMES._fields]
		return (self.CODEC.pack(*ordered_data) + DHCP_MAGIC_COOKIE
			+ self.options.encode())

	@classmethod
	def decode(cls, packet):
		packet = bytes(packet)
		header_size = cls.CODEC.size + len(DHCP_MAGIC_COOKIE)
		if len(packet) < header_size:
			raise MalformedOption('packet too short for a DHCP header: %d'
				' bytes' % len(packet))
		self = cls()
		data = cls.CODEC.unpack(packet[:cls.CODEC.size])
		self.raw_data = cls.NAMES._make(data)._asdict()
		magic_cookie = packet[cls.CODEC.size:header_size]
		if magic_cookie != DHCP_MAGIC_COOKIE:
			warn('bad magic cookie: {cookie}'.format(cookie=magic_cookie))
		self.options = OptionMap.decode(packet[header_size:],
			dhcp_option_codecs, DHCP_OPTIONS_BUDGET)
		vendor_data = self.options.raw(
			DHCPOptionType.VENDOR_SPECIFIC_INFORMATION, b'')
		self.vendor_options = OptionMap.decode(vendor_data,
			bsdp_option_codecs, VENDOR_OPTIONS_BUDGET)
		return self

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
