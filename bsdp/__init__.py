"""BSDP

Boot Service Discovery Protocol (Apple NetBoot) server

"""

__version__ = '0.0.1'
# SPDX-License-Identifier: MIT
__license__ = 'MIT'

from .message import BSDPMessage
from .imagedb import BootImage, ImageCatalog
from .responder import Responder

__all__ = ['BSDPMessage', 'BootImage', 'ImageCatalog', 'Responder']

# vim:set ft=python ts=4 sw=4 ai noet cc=80:
