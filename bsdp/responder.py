# SPDX-License-Identifier: MIT

__all__ = ['Reply', 'ClientClass', 'Responder', 'parse_client_class']

from collections import namedtuple
from ipaddress import IPv4Address

from .dhcp import DHCPOptionType, MessageType
from .error import UnresolvedClientClass
from .imagedb import Architecture
from .listener import DHCP_CLIENT_PORT
from .message import BSDPMessage, Operation
from .vendor import BSDPOptionType, BSDPMessageType, SERVER_PRIORITY

Reply = namedtuple('Reply', 'message address')
ClientClass = namedtuple('ClientClass', 'vendor arch system_id')

# NOTE: the first packet also carries the default image
FIRST_PACKET_IMAGES = 1
IMAGES_PER_PACKET = 2


def parse_client_class(vendor_class):
	if vendor_class is None:
		raise UnresolvedClientClass('no vendor class identifier')
	fields = vendor_class.split('/')
	if len(fields) != 3:
		raise UnresolvedClientClass('vendor class %r is not'
			' vendor/arch/system' % vendor_class)
	vendor, arch, system_id = fields
	try:
		arch = Architecture(arch)
	except ValueError:
		raise UnresolvedClientClass('unknown architecture %r in vendor'
			' class %r' % (arch, vendor_class)) from None
	return ClientClass(vendor, arch, system_id)


class Responder:
	"""Answers BSDP requests from the image catalog

	`handle()` returns the replies for one request, each paired with the
	address it goes to; requests it does not answer produce no replies.
	Handlers are looked up as `do_<DHCP type>_<BSDP type>`.
	"""

	def __init__(self, logger, catalog, ip):
		self.logger = logger
		self.catalog = catalog
		self.ip = IPv4Address(ip)

	def handle(self, request):
		if BSDPOptionType.VERSION not in request.vendor_options:
			self.logger.debug('%s - not a BSDP request', request.mac_address)
			return []
		dhcp_type = request.message_type
		bsdp_type = request.vendor_options.get(BSDPOptionType.MESSAGE_TYPE)
		if not (isinstance(dhcp_type, MessageType)
			and isinstance(bsdp_type, BSDPMessageType)):
			self.logger.info('%s - ignoring message type %r/%r',
				request.mac_address, dhcp_type, bsdp_type)
			return []

		handler = getattr(self, 'do_%s_%s' % (dhcp_type.name, bsdp_type.name),
			None)
		if handler is None:
			self.logger.debug('%s - nothing to do for %s/%s',
				request.mac_address, dhcp_type.name, bsdp_type.name)
			return []

		try:
			replies = handler(request)
		except UnresolvedClientClass as e:
			self.logger.info('%s - %s', request.mac_address, e)
			return []

		self.logger.info('%s - received %s/%s, replying %d packet(s)',
			request.mac_address, dhcp_type.name, bsdp_type.name, len(replies))
		return replies

	def reply_address(self, request):
		port = request.vendor_options.get(BSDPOptionType.REPLY_PORT,
			DHCP_CLIENT_PORT)
		return (str(request.client_ip), port)

	def make_response_packet(self, request, bsdp_type):
		response = BSDPMessage(
			op=Operation.REPLY,
			htype=request.hardware_type,
			hops=request.hops,
			xid=request.transaction_id,
			secs=request.seconds,
			flags=request.flags,
			ciaddr=request.client_ip,
			siaddr=self.ip,
			giaddr=request.gateway_ip,
			hwaddr=request.hardware_address,
		)
		response.message_type = MessageType.ACK
		response.options[DHCPOptionType.SERVER_IDENTIFIER] = self.ip
		response.vendor_options[BSDPOptionType.MESSAGE_TYPE] = bsdp_type
		response.vendor_options[BSDPOptionType.SERVER_IDENTIFIER] = self.ip
		return response

	def find_candidates(self, client, filters):
		candidates = []
		seen = set()
		for image in self.catalog.find_bootable(client.arch, client.system_id,
			filters):
			if image.ref not in seen:
				seen.add(image.ref)
				candidates.append(image)
		return candidates

	def do_INFORM_LIST(self, request):
		client = parse_client_class(request.vendor_class)
		address = self.reply_address(request)
		candidates = self.find_candidates(client, request.vendor_options.get(
			BSDPOptionType.BOOT_IMAGE_ATTRIBUTES_FILTER_LIST))
		default = self.catalog.last_selected(request.mac_address, client.arch,
			client.system_id)

		response = self.make_response_packet(request, BSDPMessageType.LIST)
		response.vendor_options[BSDPOptionType.SERVER_PRIORITY] = \
			SERVER_PRIORITY
		images = {}
		if default is not None:
			response.vendor_options[BSDPOptionType.DEFAULT_BOOT_IMAGE_ID] = \
				default.ref
			images[default.ref] = default.description
			candidates = [image for image in candidates
				if image.ref != default.ref]
		for image in candidates[:FIRST_PACKET_IMAGES]:
			images[image.ref] = image.description
		candidates = candidates[FIRST_PACKET_IMAGES:]
		if images:
			response.vendor_options[BSDPOptionType.BOOT_IMAGE_LIST] = images
		replies = [Reply(response, address)]

		while candidates:
			response = self.make_response_packet(request, BSDPMessageType.LIST)
			response.vendor_options[BSDPOptionType.BOOT_IMAGE_LIST] = {
				image.ref: image.description
				for image in candidates[:IMAGES_PER_PACKET]
			}
			candidates = candidates[IMAGES_PER_PACKET:]
			replies.append(Reply(response, address))

		return replies

	def do_INFORM_SELECT(self, request):
		client = parse_client_class(request.vendor_class)
		selected = request.vendor_options.get(
			BSDPOptionType.SELECTED_BOOT_IMAGE_ID)
		if selected is None:
			self.logger.info('%s - select without an image id',
				request.mac_address)
			return self.handle_select_failed(request)
		for image in self.catalog.find_bootable(client.arch, client.system_id):
			if image.index == selected.index:
				return self.handle_select_ack(request, client, image)
		selected = self.catalog.find_by_ref(selected)
		self.logger.info('%s - image %s is not bootable for %s/%s',
			request.mac_address, selected, client.arch.value,
			client.system_id)
		return self.handle_select_failed(request)

	def handle_select_ack(self, request, client, image):
		mac = request.mac_address
		self.catalog.record_selection(mac, image)

		response = self.make_response_packet(request, BSDPMessageType.SELECT)
		response.server_name = self.catalog.boot_server_name(image)
		response.boot_file_name = self.catalog.boot_file_path(image,
			client.arch)
		for option, value in self.catalog.extra_dhcp_options(image,
			mac).items():
			response.options[option] = value
		response.vendor_options.set_raw(BSDPOptionType.SELECTED_BOOT_IMAGE_ID,
			request.vendor_options.raw(BSDPOptionType.SELECTED_BOOT_IMAGE_ID))
		for option, value in self.catalog.extra_bsdp_options(image,
			mac).items():
			response.vendor_options[option] = value

		self.logger.info('%s - selected %s', mac, image)
		return [Reply(response, self.reply_address(request))]

	def handle_select_failed(self, request):
		response = self.make_response_packet(request, BSDPMessageType.FAILED)
		return [Reply(response, self.reply_address(request))]

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
