"""Velocity visualization for inspection and the headless launcher.

Direction map: HSV color encoding (direction -> hue, magnitude -> value).
Images are returned in OpenCV layout: top row first, BGR(A) uint8.
"""

import cv2
import numpy as np

from liquidfield.gl import Texture


def direction_map(velocity: Texture, scale: float = 1.0) -> np.ndarray:
    """Render an RG velocity texture as a BGR direction map.

    Args:
        velocity: Velocity field (RG)
        scale: Magnitude that maps to full brightness is 1 / scale
    """
    values = velocity.read()
    vx = np.ascontiguousarray(values[..., 0])
    vy = np.ascontiguousarray(values[..., 1]) if velocity.channels > 1 else np.zeros_like(vx)

    magnitude, angle = cv2.cartToPolar(vx, vy, angleInDegrees=True)
    hsv = np.zeros(vx.shape + (3,), dtype=np.uint8)
    hsv[..., 0] = (angle * 0.5).astype(np.uint8)                               # OpenCV hue is 0-179
    hsv[..., 1] = 255
    hsv[..., 2] = np.clip(magnitude * scale * 255.0, 0, 255).astype(np.uint8)

    return cv2.flip(cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR), 0)


def texture_to_image(texture: Texture) -> np.ndarray:
    """Convert an RGBA / RG / R texture in [0, 1] to a BGRA / BGR / gray image."""
    values = np.clip(texture.read(), 0.0, 1.0)
    image = np.rint(values * 255.0).astype(np.uint8)
    if texture.channels == 4:
        image = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    elif texture.channels == 2:
        image = np.concatenate((np.zeros(image.shape[:2] + (1,), np.uint8), image[..., 1:2], image[..., 0:1]), axis=2)
    else:
        image = image[..., 0]
    return cv2.flip(image, 0)
