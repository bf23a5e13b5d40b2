"""Neural network model architectures."""

from .dncnn import ResidualDenoisingCNN

__all__ = ["ResidualDenoisingCNN"]
