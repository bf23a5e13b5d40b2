"""
DnCNN-style residual denoising network.

The network predicts the noise component of a single-channel image; the
clean image is recovered outside the model by subtraction.
"""

import torch
from torch import nn


class ResidualDenoisingCNN(nn.Module):
    """
    Plain convolutional noise predictor.

    Architecture:
        Conv2d -> ReLU -> (Conv2d -> BatchNorm -> ReLU) x (num_layers - 2) -> Conv2d

    All convolutions are 3x3 with padding 1, so the predicted residual has
    the same spatial size as the input.

    Args:
        channels: Number of image channels (1 for grayscale).
        num_layers: Total number of convolution layers (17 in the usual DnCNN).
        features: Width of the hidden layers.
    """

    def __init__(
        self,
        channels: int = 1,
        num_layers: int = 17,
        features: int = 64,
    ) -> None:
        """Initialize the layer stack."""
        super().__init__()

        if num_layers < 2:
            raise ValueError(f"num_layers must be at least 2, got {num_layers}")

        layers = [
            nn.Conv2d(channels, features, kernel_size=3, padding=1, bias=True),
            nn.ReLU(inplace=True),
        ]
        for _ in range(num_layers - 2):
            layers += [
                nn.Conv2d(features, features, kernel_size=3, padding=1, bias=False),
                nn.BatchNorm2d(features),
                nn.ReLU(inplace=True),
            ]
        layers.append(nn.Conv2d(features, channels, kernel_size=3, padding=1, bias=True))

        self.layers = nn.Sequential(*layers)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Predict the noise residual.

        Args:
            x: Input tensor (B, C, H, W) in [0, 1].

        Returns:
            Residual tensor (B, C, H, W).
        """
        return self.layers(x)
