# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package discovery and graph resolution.

Pipeline: patterns -> scanner / stdlib injection -> extractor -> graph.
`loader` wraps the pipeline in the two resolver variants.
"""

from .descriptor import DiscoveredPackage, PackageDescriptor, PackageError
from .loader import BatchResolver, PackageLoader, ResidentResolver
from .request import DriverRequest, DriverResponse

__all__ = [
	"BatchResolver",
	"DiscoveredPackage",
	"DriverRequest",
	"DriverResponse",
	"PackageDescriptor",
	"PackageError",
	"PackageLoader",
	"ResidentResolver",
]
