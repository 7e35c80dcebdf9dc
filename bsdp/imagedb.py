# SPDX-License-Identifier: MIT

__all__ = ['Architecture', 'ImageType', 'BootImage', 'ImageCatalog']

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path

from .dhcp import DHCPOptionType
from .vendor import BSDPOptionType, ImageRef


@enum.unique
class Architecture(enum.Enum):
	I386 = 'i386'
	PPC = 'ppc'
	X86_64 = 'x86_64'
	IA64 = 'ia64'


@enum.unique
class ImageType(enum.Enum):
	NFS = 'NFS'
	CLASSIC = 'Classic'
	HTTP = 'HTTP'
	BOOT_FILE_ONLY = 'BootFileOnly'


@dataclass(eq=False)
class BootImage:
	name: str
	index: int
	kind: int
	install: bool = False
	description: str = ''
	boot_file: str = ''
	root_path: str = None
	architectures: list = field(default_factory=list)
	enabled_identifiers: list = field(default_factory=list)
	disabled_identifiers: list = field(default_factory=list)
	default: bool = False
	enabled: bool = True
	supports_diskless: bool = False
	type: ImageType = ImageType.NFS
	language: str = ''
	os_version: str = ''

	def __post_init__(self):
		if self.index not in range(0x10000):
			raise ValueError('image index %r not in range(0x10000)'
				% (self.index,))
		if not (self.description or '').strip():
			self.description = self.name
		self.architectures = [Architecture(arch) for arch in self.architectures]
		enabled, disabled = self.enabled_identifiers, self.disabled_identifiers
		self.enabled_identifiers, self.disabled_identifiers = [], []
		for identifier in enabled:
			self.add_enabled_identifier(identifier)
		for identifier in disabled:
			self.add_disabled_identifier(identifier)

	@property
	def ref(self):
		return ImageRef(bool(self.install), self.kind, self.index)

	@property
	def bundle_name(self):
		return self.name + '.nbi'

	def add_enabled_identifier(self, identifier):
		if identifier not in self.enabled_identifiers:
			self.enabled_identifiers.append(identifier)
		if identifier in self.disabled_identifiers:
			self.disabled_identifiers.remove(identifier)

	def add_disabled_identifier(self, identifier):
		if identifier not in self.disabled_identifiers:
			self.disabled_identifiers.append(identifier)
		if identifier in self.enabled_identifiers:
			self.enabled_identifiers.remove(identifier)

	def remove_identifier(self, identifier):
		for identifiers in (self.enabled_identifiers,
			self.disabled_identifiers):
			if identifier in identifiers:
				identifiers.remove(identifier)

	def boots(self, arch, client_id):
		return (self.enabled and arch in self.architectures
			and client_id in self.enabled_identifiers)

	def matches(self, install, kind):
		return bool(self.install) == bool(install) and self.kind == kind

	def __str__(self):
		return '%s[index=%d,kind=%s,install=%s]' % (self.name, self.index,
			getattr(self.kind, 'name', self.kind), self.install)


class ImageCatalog:
	"""The boot images this server offers, and what each client last chose

	`selections` is any object with `get_last_selection(mac)`,
	`set_last_selection(mac, index)` and `get_client_setting(mac, key,
	default)`; `settings` provides the server name and the URLs the boot
	paths are built from.
	"""

	def __init__(self, images, selections, settings, logger=None):
		self.images = list(images)
		self.selections = selections
		self.settings = settings
		if logger is None:
			logger = logging.getLogger(__name__)
		self.logger = logger

	def __iter__(self):
		return iter(self.images)

	def __len__(self):
		return len(self.images)

	def find_bootable(self, arch, client_id, filters=None):
		bootable = [image for image in self.images
			if image.boots(arch, client_id)]
		if filters is None:
			return bootable
		# NOTE: union in filter order, duplicates are left to the caller
		return [image
			for install, kind in filters
			for image in bootable
			if image.matches(install, kind)]

	def find_default(self, arch, client_id):
		for image in self.images:
			if image.default and image.boots(arch, client_id):
				return image
		return None

	def last_selected(self, mac, arch, client_id):
		index = self.selections.get_last_selection(mac)
		if index is not None:
			for image in self.images:
				if image.index == index and image.boots(arch, client_id):
					return image
		return self.find_default(arch, client_id)

	def record_selection(self, mac, image):
		self.selections.set_last_selection(mac, image.index)

	def find_by_ref(self, ref):
		install, kind, index = ref
		for image in self.images:
			if image.index == index and image.matches(install, kind):
				return image
		return ImageRef(bool(install), kind, index)

	def boot_server_name(self, image):
		return self.settings.server_name

	def boot_file_path(self, image, arch):
		return '/'.join((self.settings.server_path, image.bundle_name,
			Architecture(arch).value, image.boot_file))

	def root_path(self, image):
		if image.type == ImageType.BOOT_FILE_ONLY:
			return None
		path = '%s/%s' % (image.bundle_name, image.root_path or '')
		if image.type == ImageType.CLASSIC:
			return '%s/%s' % (self.settings.afp_url, path)
		if image.type == ImageType.HTTP:
			return '%s/%s' % (self.settings.http_url, path)
		if image.type == ImageType.NFS:
			return '%s:%s' % (self.settings.nfs_url, path)
		raise ValueError('unhandled image type: %r' % (image.type,))

	def extra_dhcp_options(self, image, mac):
		root_path = self.root_path(image)
		if root_path is None:
			return {}
		return {DHCPOptionType.ROOT_PATH: root_path}

	def extra_bsdp_options(self, image, mac):
		if not image.supports_diskless:
			return {}
		machine_name = 'mac-' + mac.replace(':', '-')
		self.prepare_shadow_directory(machine_name)
		return {
			BSDPOptionType.SHADOW_FILE_PATH: self.selections.get_client_setting(
				mac, 'shadow_file_path', machine_name + '/ShadowFile'),
			BSDPOptionType.SHADOW_MOUNT_PATH: self.selections.get_client_setting(
				mac, 'shadow_mount_path', self.settings.shadow_url),
			BSDPOptionType.MACHINE_NAME: machine_name,
		}

	def prepare_shadow_directory(self, machine_name):
		if not self.settings.shadow_path:
			return
		shadow_root = Path(self.settings.shadow_path)
		if not shadow_root.is_dir():
			self.logger.error('shadow path %s is not a directory', shadow_root)
			return
		client_directory = shadow_root / machine_name
		try:
			client_directory.mkdir(exist_ok=True)
			client_directory.chmod(0o777)
		except OSError as e:
			self.logger.error('could not prepare shadow directory %s (caused'
				' by %r)', client_directory, e)

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
