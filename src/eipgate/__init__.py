"""Pull request gate that lints changed EIP documents with eipw."""

__version__ = "1.0.0"
