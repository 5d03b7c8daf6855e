"""A small stack virtual machine for a simple assembly language, with a multicast pairing demo."""

__version__ = "0.1.0"
__all__ = ["__version__"]