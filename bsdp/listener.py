# SPDX-License-Identifier: MIT

__all__ = ['BSDP_ADDRESS', 'DHCP_SERVER_PORT', 'DHCP_CLIENT_PORT', 'listen',
	'get_ip_from_iface', 'list_ifaces']

import os
import socket
from ipaddress import IPv4Address
from struct import pack

BSDP_ADDRESS = '0.0.0.0'
BSDP_TYPE = socket.SOCK_DGRAM

DHCP_SERVER_PORT = 67
DHCP_CLIENT_PORT = 68


def get_ip_from_iface(ifname):
	from fcntl import ioctl

	# NOTE: constant from net/if.h
	IF_NAMESIZE = 16
	# NOTE: constant from sys/ioctl.h
	SIOCGIFADDR = 0x8915

	if isinstance(ifname, str):
		ifname = ifname.encode('utf-8')
	with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
		# NOTE: fails with errno 99 on an interface without an address and
		# with errno 19 on an unknown interface
		ifreq = ioctl(sock.fileno(), SIOCGIFADDR,
			pack('!256s', ifname[:IF_NAMESIZE - 1]))
	# NOTE: `struct sockaddr_in` inside `struct ifreq`, see netdevice(7)
	return IPv4Address(ifreq[20:24])


def list_ifaces():
	return os.listdir('/sys/class/net')


def listen(address=BSDP_ADDRESS, port=DHCP_SERVER_PORT, interface=None):
	for family, type_, proto, _, _ in socket.getaddrinfo(address, port,
		socket.AF_INET, BSDP_TYPE):
		sock = socket.socket(family, type_, proto)
		sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		# NOTE: replies go to ciaddr, which may be a broadcast address
		sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
		if interface is not None:
			if isinstance(interface, str):
				interface = interface.encode('utf-8')
			sock.setsockopt(socket.SOL_SOCKET, socket.SO_BINDTODEVICE,
				interface + b'\0')
		sock.bind((address, port))
		return sock
	raise OSError('could not listen on %s:%d' % (address, port))

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
