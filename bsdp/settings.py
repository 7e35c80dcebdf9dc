# SPDX-License-Identifier: MIT

__all__ = ['Settings', 'SettingsStore', 'CLIENT_SETTINGS']

import json
import os
import threading
from dataclasses import dataclass, asdict, fields, replace
from pathlib import Path

CLIENT_SETTINGS = ('shadow_file_path', 'shadow_mount_path')


@dataclass
class Settings:
	server_name: str
	server_path: str = 'apple'
	http_url: str = ''
	afp_url: str = ''
	nfs_url: str = ''
	shadow_url: str = ''
	shadow_path: str = None
	image_location: str = '/srv/netboot/NetBootSP0'
	sanity_checks: bool = True

	@classmethod
	def from_address(cls, ip, **overrides):
		ip = str(ip)
		defaults = cls(
			server_name=ip,
			http_url='http://%s/NetBootSP0' % ip,
			afp_url='afp://%s/NetBootSP0' % ip,
			nfs_url='nfs:%s:/local/system/NetBootSP0' % ip,
			shadow_url='afp://%s/NetBootClients0' % ip,
		)
		known = {field.name for field in fields(cls)}
		return replace(defaults, **{
			key: value for key, value in overrides.items()
			if key in known and value is not None
		})


class SettingsStore:
	"""Persisted server settings, per-client image selections and overrides

	Everything lives in one JSON document at `path`; without a path the
	store only keeps state in memory.  Writers are serialized by a lock, so
	one store may be shared between worker threads.

	Client overrides are keyed by MAC address; `shadow_file_path` and
	`shadow_mount_path` replace what diskless clients are told by default.
	"""

	def __init__(self, path=None):
		self.path = None if path is None else Path(path)
		self.lock = threading.Lock()
		self._settings = {}
		self._selections = {}
		self._clients = {}
		if self.path is not None and self.path.exists():
			self.load()

	def load(self):
		with self.lock:
			document = json.loads(self.path.read_text(encoding='utf-8'))
			self._settings = dict(document.get('settings', {}))
			self._selections = {
				mac: int(index)
				for mac, index in document.get('selections', {}).items()
			}
			self._clients = {
				mac: dict(values)
				for mac, values in document.get('clients', {}).items()
			}

	def _save(self):
		if self.path is None:
			return
		document = {
			'settings': self._settings,
			'selections': self._selections,
			'clients': self._clients,
		}
		temporary = self.path.with_name(self.path.name + '.tmp')
		temporary.write_text(json.dumps(document, indent=4, sort_keys=True),
			encoding='utf-8')
		os.replace(temporary, self.path)

	def get_last_selection(self, mac):
		with self.lock:
			return self._selections.get(mac)

	def set_last_selection(self, mac, index):
		if index not in range(0x10000):
			raise ValueError('image index %r not in range(0x10000)' % (index,))
		with self.lock:
			self._selections[mac] = index
			self._save()

	def get_client_setting(self, mac, key, default=None):
		with self.lock:
			return self._clients.get(mac, {}).get(key, default)

	def set_client_setting(self, mac, key, value):
		if key not in CLIENT_SETTINGS:
			raise TypeError('unknown client setting: %s' % key)
		with self.lock:
			values = self._clients.setdefault(mac, {})
			if value is None:
				values.pop(key, None)
				if not values:
					del self._clients[mac]
			else:
				values[key] = value
			self._save()

	def settings(self, ip):
		with self.lock:
			return Settings.from_address(ip, **self._settings)

	def update_settings(self, **values):
		known = {field.name for field in fields(Settings)}
		unknown = set(values) - known
		if unknown:
			raise TypeError('unknown settings: %s' % ', '.join(sorted(unknown)))
		with self.lock:
			for key, value in values.items():
				if value is not None:
					self._settings[key] = value
			self._save()

	def asdict(self, ip):
		return asdict(self.settings(ip))

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
