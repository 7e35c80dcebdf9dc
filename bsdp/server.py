# SPDX-License-Identifier: MIT

__all__ = ['Server', 'BSDPDaemon', 'configure_logging', 'main']

import logging
import socket
import threading
from sys import stderr
from time import sleep

from .error import FieldTooLong, OptionTooLarge
from .imagedb import ImageCatalog
from .imageinfo import load_images
from .listener import (listen, get_ip_from_iface, list_ifaces, BSDP_ADDRESS,
	DHCP_SERVER_PORT)
from .message import BSDPMessage
from .responder import Responder
from .settings import SettingsStore

RECEIVE_TIMEOUT = 3


class Server:
	def __init__(self, logger, responder, sock, timeout=RECEIVE_TIMEOUT):
		self.logger = logger
		self.responder = responder
		self.sock = sock
		self.sock.settimeout(timeout)

	def recv(self):
		return self.sock.recvfrom(65535)

	def send(self, reply):
		data = reply.message.encode()
		try:
			self.sock.sendto(data, reply.address)
		except OSError as e:
			self.logger.error('could not send reply to %s:%d (caused by %r)',
				*reply.address, e)
			return
		self.logger.debug('sent to %s:%d: %r', *reply.address, reply.message)

	def handle_client(self):
		try:
			data, address = self.recv()
		except socket.timeout:
			return

		try:
			request = BSDPMessage.decode(data)
		except Exception as e:
			self.logger.error('could not decode packet from %s:%d (caused by'
				' %r)', *address[:2], e)
			return
		self.logger.debug('received from %s:%d: %r', *address[:2], request)

		try:
			replies = self.responder.handle(request)
			for reply in replies:
				self.send(reply)
		except (OptionTooLarge, FieldTooLong) as e:
			# NOTE: a reply that cannot be encoded means the catalog is wrong
			self.logger.critical('could not encode reply (caused by %r)', e)
			raise
		except Exception as e:
			self.logger.error('could not handle request (caused by %r)', e)


def configure_logging(output='-', level='INFO'):
	if isinstance(output, str):
		if output == '-':
			log_handler = logging.StreamHandler(stderr)
		else:
			log_handler = logging.FileHandler(output)
	else:
		log_handler = logging.StreamHandler(output)

	log_format = '{asctime}|{name}|{levelname}|{message}'
	log_formatter = logging.Formatter(log_format, style='{')
	log_handler.setFormatter(log_formatter)

	logger = logging.Logger('bsdp')
	logger.addHandler(log_handler)

	logger.setLevel(level)

	return logger


class BSDPDaemon:
	def client_target(self):
		try:
			while self.running:
				self.server.handle_client()
		finally:
			self.running = False

	def __init__(self, *args, **kwargs):
		self.server = Server(*args, **kwargs)
		self.running = False
		self.client_thread = None

	@property
	def alive(self):
		return self.client_thread is not None and self.client_thread.is_alive()

	def run(self):
		if self.running:
			return False
		self.running = True
		self.client_thread = threading.Thread(target=self.client_target,
			name='bsdp-client')
		self.client_thread.start()
		return True

	def stop(self):
		if self.client_thread is None:
			return False
		self.running = False
		self.client_thread.join()
		self.client_thread = None
		return True


def parse_bool(value):
	value = value.lower()
	if value not in ('true', 'false'):
		raise ValueError('expected true or false, got %r' % value)
	return value == 'true'


def find_server_ip(bind, interface):
	if interface is not None:
		return get_ip_from_iface(interface)
	if bind != BSDP_ADDRESS:
		return bind
	return socket.gethostbyname(socket.gethostname())


def main():
	import argparse

	parser = argparse.ArgumentParser(
		description='Boot Service Discovery Protocol (NetBoot) server')
	action = parser.add_mutually_exclusive_group()
	action.add_argument('--server', action='store_true',
		help='run the server')
	action.add_argument('-s', '--settings', action='store_true',
		help='print the settings and the loadable images, then exit')
	parser.add_argument('-m', '--server-name',
		help='boot server name sent to clients')
	parser.add_argument('-p', '--server-path',
		help='TFTP path prefix of the boot files')
	parser.add_argument('-t', '--http-url', help='URL of the HTTP share')
	parser.add_argument('-a', '--afp-url', help='URL of the AFP share')
	parser.add_argument('-n', '--nfs-url', help='URL of the NFS share')
	parser.add_argument('-l', '--image-location',
		help='directory holding the .nbi image bundles')
	parser.add_argument('-o', '--shadow-url',
		help='URL diskless clients mount their shadow files from')
	parser.add_argument('-j', '--shadow-path',
		help='local directory behind the shadow URL')
	parser.add_argument('--sanity-checks', type=parse_bool,
		metavar='{true,false}', help='check image bundles before loading')
	parser.add_argument('-f', '--log-file', default='-',
		type=argparse.FileType('w'), help='location to log messages')
	parser.add_argument('-d', '--log-level', default='INFO', choices=('ALL',
		'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'), type=str.upper,
		help='verbosity of log messages, in descending order')
	parser.add_argument('-b', '--bind', default=BSDP_ADDRESS,
		help='address to listen on')
	parser.add_argument('-i', '--interface', choices=list_ifaces(),
		help='interface on which to bind: one of %(choices)s')
	parser.add_argument('-c', '--config', default='bsdpd.json',
		help='file persisting the settings and client selections')
	args = parser.parse_args()

	if not (args.server or args.settings):
		parser.print_help()
		return 1

	target = args.log_file
	level = 0 if args.log_level == 'ALL' else getattr(logging, args.log_level)
	logger = configure_logging(output=target, level=level)

	store = SettingsStore(args.config)
	store.update_settings(
		server_name=args.server_name,
		server_path=args.server_path,
		http_url=args.http_url,
		afp_url=args.afp_url,
		nfs_url=args.nfs_url,
		image_location=args.image_location,
		shadow_url=args.shadow_url,
		shadow_path=args.shadow_path,
		sanity_checks=args.sanity_checks,
	)
	ip = find_server_ip(args.bind, args.interface)
	settings = store.settings(ip)
	logger.info('using settings: %s', ', '.join(
		'%s=%r' % item for item in store.asdict(ip).items()))

	images = load_images(settings.image_location, settings.sanity_checks,
		logger)
	catalog = ImageCatalog(images, store, settings, logger)

	if args.settings:
		for key, value in store.asdict(ip).items():
			print('%s = %s' % (key, value))
		for image in catalog:
			print('image %s' % image)
		return 0

	try:
		sock = listen(args.bind, DHCP_SERVER_PORT, args.interface)
		daemon = BSDPDaemon(logger, Responder(logger, catalog, ip), sock)
		daemon.run()
		logger.info('listening on %s:%d as %s', args.bind, DHCP_SERVER_PORT,
			ip)
		try:
			while daemon.alive:
				sleep(1)
		except KeyboardInterrupt:
			daemon.stop()
			return 0
		daemon.stop()
	except Exception as e:
		logger.error('unhandled server error (caused by %r)', e)
		if __debug__:
			raise e
	return 1


if __name__ == '__main__':
	raise SystemExit(main())

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
