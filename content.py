# content.py
"""
Image content source.

Loading happens outside the simulation core; its outcome reaches the core
as exactly one message, ImageReady or ImageFailed.
"""
import logging
import pygame
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ImageReady:
    image: pygame.Surface


@dataclass(frozen=True)
class ImageFailed:
    reason: str


ImageResult = Union[ImageReady, ImageFailed]


def load_image(path: str) -> ImageResult:
    """Decodes an image file. Failures are reported as ImageFailed, never raised."""
    try:
        image = pygame.image.load(path)
    except (pygame.error, FileNotFoundError) as e:
        logging.warning(f"Could not load image {path}: {e}. Image mode falls back to cloud.")
        return ImageFailed(str(e))

    logging.info(f"Image {path} decoded ({image.get_width()}x{image.get_height()}).")
    return ImageReady(image)
