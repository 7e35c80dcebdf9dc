# SPDX-License-Identifier: MIT

__all__ = ['CodecError', 'Codec', 'CodecRegistry', 'make_unpacker',
	'make_guarded', 'make_fixed', 'uint8', 'uint16', 'empty_codec',
	'ip_codec', 'string_codec', 'bytes_codec', 'uint8_codec', 'uint16_codec']

from functools import wraps
from ipaddress import IPv4Address
from struct import Struct, error as StructError

from .error import MalformedOption, DuplicateRegistration

uint8 = Struct('!B')
uint16 = Struct('!H')


class CodecError(LookupError):
	pass


class Codec:
	def __init__(self, *, name=None, codecs=None):
		if name is None:
			name = 'codec_%s' % id(self)
		self.name = name
		if codecs is None:
			codecs = {}
		self.codecs = codecs

	def get_codec(self, option):
		try:
			return self.codecs[option]
		except KeyError:
			raise CodecError('option %r cannot be encoded by this codec (%s)'
				% (option, self.name)
			) from None

	def __contains__(self, option):
		return option in self.codecs


class CodecRegistry:
	"""Maps option codes to (encoder, decoder) pairs

	Every code is bound at most once across all registered codecs; a second
	binding raises `DuplicateRegistration`.  Decoding an unregistered code
	yields None, the caller treats the option as absent.
	"""

	def __init__(self, name=None):
		if name is None:
			name = 'registry_%s' % id(self)
		self.name = name
		self.option_codecs = []

	def register(self, option_codec, priority=None):
		if not isinstance(option_codec, Codec):
			raise TypeError('%r is not an instance of Codec' % option_codec)
		for option in option_codec.codecs:
			if option in self:
				raise DuplicateRegistration(
					'option %r of %s is already registered in %s'
					% (option, option_codec.name, self.name))
		if priority is None:
			priority = len(self.option_codecs)
		self.option_codecs.insert(priority, option_codec)

	def unregister(self, option_codec):
		try:
			self.option_codecs.remove(option_codec)
		except ValueError:
			pass

	def __contains__(self, option):
		return any(option in option_codec
			for option_codec in self.option_codecs)

	def option_type(self, option):
		# NOTE: codec keys are IntEnum members, so this recovers the name
		for option_codec in self.option_codecs:
			for key in option_codec.codecs:
				if key == option:
					return key
		return int(option)

	def get(self, option, ignore_unknown=True):
		for option_codec in self.option_codecs:
			try:
				return option_codec.get_codec(option)
			except CodecError:
				continue
		else:
			if ignore_unknown:
				return bytes_codec
			raise CodecError('%r is not a valid option for %s'
				% (option, self.name))

	def encode(self, option, value, ignore_unknown=True):
		encoder, decoder = self.get(option, ignore_unknown)
		return encoder(value)

	def decode(self, option, value):
		try:
			encoder, decoder = self.get(option, ignore_unknown=False)
		except CodecError:
			return None
		try:
			return decoder(bytes(value))
		except MalformedOption as e:
			if e.code is not None:
				raise
			raise MalformedOption('option %r: %s'
				% (self.option_type(option), e), code=option,
				expected_length=e.expected_length) from e
		except (ValueError, StructError) as e:
			raise MalformedOption('option %r: %s'
				% (self.option_type(option), e), code=option) from e


def make_unpacker(struct):
	def unpacker(b):
		result, = struct.unpack(b)
		return result
	return unpacker


def make_guarded(fn, check=lambda _: True, message=None):
	@wraps(fn)
	def wrapper(value):
		if not check(value):
			if message is None:
				raise ValueError('invalid value for %s: %r'
					% (fn.__name__, value))
			raise ValueError(message)
		return fn(value)
	return wrapper


def make_fixed(decoder, length):
	@wraps(decoder)
	def wrapper(encoded):
		if len(encoded) != length:
			raise MalformedOption('expected exactly %d byte(s), got %d'
				% (length, len(encoded)), expected_length=length)
		return decoder(encoded)
	return wrapper


def encode_empty(decoded):
	return b''


def decode_empty(encoded):
	return None


def encode_ip(decoded):
	try:
		return IPv4Address(decoded).packed
	except Exception:
		raise ValueError('invalid decoded IP: %r' % (decoded,)) from None


def decode_ip(encoded):
	return IPv4Address(encoded)


def encode_string(decoded):
	return decoded.encode('ascii')


def decode_string(encoded):
	return encoded.decode('ascii')


# NOTE: guard only the encodes, per Postel's Law
empty_codec = (encode_empty, make_fixed(decode_empty, 0))
ip_codec = (encode_ip, make_fixed(decode_ip, 4))
string_codec = (encode_string, decode_string)
bytes_codec = (bytes, bytes)
uint8_codec = (uint8.pack, make_fixed(make_unpacker(uint8), 1))
uint16_codec = (uint16.pack, make_fixed(make_unpacker(uint16), 2))

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
