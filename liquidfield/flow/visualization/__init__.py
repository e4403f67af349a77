from .VelocityDirectionMap import direction_map, texture_to_image

__all__ = ['direction_map', 'texture_to_image']
