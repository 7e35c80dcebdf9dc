# SPDX-License-Identifier: MIT

import logging

import pytest

from bsdp.dhcp import DHCPOptionType, MessageType
from bsdp.imagedb import BootImage, ImageCatalog
from bsdp.message import BSDPMessage
from bsdp.settings import Settings, SettingsStore
from bsdp.vendor import BSDPOptionType, BSDPMessageType, BSDPVersion, ImageKind

SERVER_IP = '10.0.0.1'
CLIENT_IP = '10.0.0.23'
CLIENT_MAC = bytes.fromhex('001122334455')
SYSTEM_ID = 'MacBookPro5,1'
CLIENT_CLASS = 'AAPLBSDPC/i386/%s' % SYSTEM_ID


@pytest.fixture
def logger():
	return logging.getLogger('bsdp.tests')


@pytest.fixture
def make_image():
	def make_image(index, **kwargs):
		kwargs.setdefault('name', 'image%d' % index)
		kwargs.setdefault('kind', ImageKind.MACOSX)
		kwargs.setdefault('architectures', ['i386'])
		kwargs.setdefault('enabled_identifiers', [SYSTEM_ID])
		kwargs.setdefault('boot_file', 'booter')
		kwargs.setdefault('root_path', 'NetInstall.dmg')
		return BootImage(index=index, **kwargs)
	return make_image


@pytest.fixture
def store():
	return SettingsStore()


@pytest.fixture
def settings():
	return Settings.from_address(SERVER_IP)


@pytest.fixture
def make_catalog(store, settings, logger):
	def make_catalog(images):
		return ImageCatalog(images, store, settings, logger)
	return make_catalog


@pytest.fixture
def make_request():
	def make_request(bsdp_type=BSDPMessageType.LIST,
		dhcp_type=MessageType.INFORM, vendor_class=CLIENT_CLASS,
		vendor_options=None, version=True):
		request = BSDPMessage(xid=0x1234, ciaddr=CLIENT_IP, hwaddr=CLIENT_MAC)
		request.message_type = dhcp_type
		request.options[DHCPOptionType.VENDOR_CLASS_IDENTIFIER] = vendor_class
		request.vendor_options[BSDPOptionType.MESSAGE_TYPE] = bsdp_type
		if version:
			request.vendor_options[BSDPOptionType.VERSION] = BSDPVersion(1, 1)
		for option, value in (vendor_options or {}).items():
			request.vendor_options[option] = value
		return BSDPMessage.decode(request.encode())
	return make_request

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
