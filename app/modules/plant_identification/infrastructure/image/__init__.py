from .image_normalizer import ImageNormalizer

__all__ = ["ImageNormalizer"]
