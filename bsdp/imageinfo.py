# SPDX-License-Identifier: MIT

"""Loads boot images from `<location>/<Name>.nbi/NBImageInfo.plist` bundles"""

__all__ = ['IMAGE_INFO', 'parse_image_info', 'load_image', 'load_images']

import logging
import plistlib
from pathlib import Path

from .error import CatalogError
from .imagedb import BootImage, ImageType
from .vendor import ImageKind

IMAGE_INFO = 'NBImageInfo.plist'


def _require(info, key, kind):
	try:
		value = info[key]
	except KeyError:
		raise CatalogError('missing key %r' % key) from None
	if not isinstance(value, kind):
		raise CatalogError('key %r should be a %s, not %r'
			% (key, kind.__name__, value))
	return value


def parse_image_info(info):
	try:
		kind = ImageKind(_require(info, 'Kind', int))
		image_type = ImageType(_require(info, 'Type', str))
	except ValueError as e:
		raise CatalogError(str(e)) from e
	root_path = None
	if image_type != ImageType.BOOT_FILE_ONLY:
		root_path = info.get('RootPath', '')
	try:
		return BootImage(
			name=_require(info, 'Name', str),
			index=_require(info, 'Index', int),
			kind=kind,
			install=_require(info, 'IsInstall', bool),
			description=info.get('Description', ''),
			boot_file=_require(info, 'BootFile', str),
			root_path=root_path,
			architectures=_require(info, 'Architectures', list),
			enabled_identifiers=info.get('EnabledSystemIdentifiers', []),
			disabled_identifiers=info.get('DisabledSystemIdentifiers', []),
			default=_require(info, 'IsDefault', bool),
			enabled=_require(info, 'IsEnabled', bool),
			supports_diskless=info.get('SupportsDiskless', False),
			type=image_type,
			language=info.get('Language', ''),
			os_version=info.get('osVersion', ''),
		)
	except ValueError as e:
		raise CatalogError(str(e)) from e


def check_image(directory, image, logger):
	if directory.name != image.bundle_name:
		logger.warning('image %s does not match its name %r, skipping',
			directory.name, image.name)
		return False
	usable = True
	for arch in image.architectures:
		boot_file = directory / arch.value / image.boot_file
		if not boot_file.exists():
			logger.warning('image %s: boot file %s missing for %s',
				directory.name, image.boot_file, arch.value)
			usable = False
	if image.root_path and image.root_path.strip():
		if not (directory / image.root_path).exists():
			logger.warning('image %s: disk image %s missing',
				directory.name, image.root_path)
			usable = False
	return usable


def load_image(directory):
	path = Path(directory) / IMAGE_INFO
	try:
		with open(path, 'rb') as f:
			info = plistlib.load(f)
	except (OSError, plistlib.InvalidFileException, ValueError) as e:
		raise CatalogError('could not read %s (caused by %r)' % (path, e)) \
			from e
	if not isinstance(info, dict):
		raise CatalogError('%s does not hold a dictionary' % path)
	return parse_image_info(info)


def load_images(location, sanity_checks=True, logger=None):
	if logger is None:
		logger = logging.getLogger(__name__)
	location = Path(location)
	if not location.is_dir():
		logger.error('image location %s is not a directory', location)
		return []
	images = []
	for directory in sorted(location.iterdir()):
		if not (directory / IMAGE_INFO).is_file():
			continue
		logger.info('found image directory %s', directory)
		try:
			image = load_image(directory)
		except CatalogError as e:
			logger.warning('could not load image %s: %s', directory.name, e)
			continue
		if sanity_checks and not check_image(directory, image, logger):
			logger.warning('image %s failed its sanity checks, skipping',
				directory.name)
			continue
		logger.info('loaded image %s', image)
		images.append(image)
	return images

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
