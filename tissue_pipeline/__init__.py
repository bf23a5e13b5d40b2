"""
Tissue Pipeline - CT Tissue Segmentation and Denoising Comparison

A consolidated package for per-slice CT tissue analysis including:
- Windowing of calibrated Hounsfield fields to 8-bit display images
- Classical denoising (Gaussian blur, non-local means)
- Residual-learning denoising (DnCNN-style noise prediction)
- Threshold-based tissue segmentation (fat, muscle/tendon, bone)
- Colorized overlays and per-tissue HU statistics
- Side-by-side comparison of the three denoising variants
"""

__version__ = "1.0.0"
