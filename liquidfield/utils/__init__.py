from .Points import Point2f
