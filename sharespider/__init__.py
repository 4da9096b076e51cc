"""sharespider - SMB share enumeration and spidering."""

__version__ = "0.1.0"
