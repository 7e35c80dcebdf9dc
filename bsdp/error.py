# SPDX-License-Identifier: MIT

__all__ = ['Error', 'BSDPError', 'MalformedOption', 'OptionTooLarge',
	'FieldTooLong', 'DuplicateRegistration', 'UnresolvedClientClass',
	'CatalogError']


class Error(Exception):
	"""Base class for bsdp errors"""
	pass


class BSDPError(Error):
	"""Base class for BSDP protocol errors"""
	pass


class MalformedOption(BSDPError):
	"""An option or option table could not be decoded"""

	def __init__(self, message, code=None, expected_length=None):
		super().__init__(message)
		self.code = code
		self.expected_length = expected_length


class OptionTooLarge(BSDPError):
	"""An option table does not fit into its wire budget"""
	pass


class FieldTooLong(BSDPError):
	"""A fixed-width header field was given a value that does not fit"""
	pass


class DuplicateRegistration(BSDPError):
	"""Two codecs were registered for the same option code"""
	pass


class UnresolvedClientClass(BSDPError):
	"""The vendor class identifier is not `vendor/arch/systemIdentifier`"""
	pass


class CatalogError(Error):
	"""Boot image metadata could not be used"""
	pass

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
