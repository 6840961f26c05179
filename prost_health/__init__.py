"""
Prost Health screening core: intake, risk classification and the
screening-request PDF.
"""
from .config import VERSION

__version__ = VERSION
