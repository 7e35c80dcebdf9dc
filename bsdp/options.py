# SPDX-License-Identifier: MIT

__all__ = ['OptionMap', 'END', 'DHCP_OPTIONS_BUDGET',
	'VENDOR_OPTIONS_BUDGET']

from .error import MalformedOption, OptionTooLarge

END = 0xFF

# NOTE: budgets count the code and length bytes of every entry, but not the
# end sentinel; the DHCP one is the 312 byte options field minus the cookie
# prefix the message writes itself
DHCP_OPTIONS_BUDGET = 311
VENDOR_OPTIONS_BUDGET = 255


class OptionMap:
	"""A table of tag-length-value options

	Values are kept encoded, keyed by their one byte code, and converted
	through `registry` on access.  The same class serves the DHCP options
	field and the vendor-specific table nested inside option 43; only the
	registry and the byte budget differ.
	"""

	def __init__(self, registry, budget, values=None):
		self.registry = registry
		self.budget = budget
		self._options = {}
		if values is not None:
			for key, value in values.items():
				self.set_raw(key, value)

	@staticmethod
	def check_code(key):
		code = int(key)
		if code not in range(END):
			raise ValueError('%r is not a usable option code' % (key,))
		return code

	def __getitem__(self, key):
		code = self.check_code(key)
		return self.registry.decode(code, self._options[code])

	def __setitem__(self, key, value):
		code = self.check_code(key)
		self.set_raw(code, self.registry.encode(code, value))

	def __delitem__(self, key):
		del self._options[self.check_code(key)]

	def __contains__(self, key):
		return int(key) in self._options

	def __iter__(self):
		return iter(self._options)

	def __len__(self):
		return len(self._options)

	def __eq__(self, other):
		if not isinstance(other, OptionMap):
			return NotImplemented
		return self._options == other._options

	def get(self, key, default=None):
		if key not in self:
			return default
		return self[key]

	def raw(self, key, default=None):
		return self._options.get(int(key), default)

	def set_raw(self, key, value):
		code = self.check_code(key)
		value = bytes(value)
		if len(value) > 0xFF:
			raise OptionTooLarge('option %r payload is %d bytes, at most 255'
				' fit' % (self.registry.option_type(code), len(value)))
		self._options[code] = value

	def keys(self):
		return self._options.keys()

	def values(self):
		return self._options.values()

	def items(self):
		return self._options.items()

	def asdict(self):
		return {**self._options}

	def decoded_items(self):
		for code in self._options:
			yield self.registry.option_type(code), self[code]

	def size(self):
		return sum(2 + len(value) for value in self._options.values())

	def encode(self, terminate=True):
		size = self.size()
		if size > self.budget:
			raise OptionTooLarge('options need %d bytes, at most %d fit (%s)'
				% (size, self.budget, ', '.join(
					'%r=%d' % (self.registry.option_type(code), len(value))
					for code, value in self._options.items())))
		opts = bytearray()
		for code, value in self._options.items():
			opts += bytes([code, len(value)])
			opts += value
		if terminate:
			opts.append(END)
		return bytes(opts)

	@staticmethod
	def decode_bytes(raw_data):
		options = {}
		position = 0
		# NOTE: a missing end sentinel ends the table at the end of the buffer
		while position < len(raw_data):
			code = raw_data[position]
			if code == END:
				break
			if position + 1 >= len(raw_data):
				raise MalformedOption('option %d has no length byte' % code,
					code=code)
			length = raw_data[position + 1]
			start = position + 2
			if start + length > len(raw_data):
				raise MalformedOption(
					'option %d declares %d bytes, only %d remain'
					% (code, length, len(raw_data) - start),
					code=code, expected_length=length)
			# NOTE: last occurrence wins
			options[code] = bytes(raw_data[start:start + length])
			position = start + length
		return options

	@classmethod
	def decode(cls, raw_data, registry, budget):
		return cls(registry, budget, cls.decode_bytes(raw_data))

	def __repr__(self):
		parts = []
		for code, value in self._options.items():
			try:
				decoded = self[code]
			except MalformedOption:
				decoded = value
			if decoded is None and code not in self.registry:
				decoded = value
			parts.append('%r: %r' % (self.registry.option_type(code), decoded))
		return '%s({%s})' % (type(self).__name__, ', '.join(parts))

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
